"""Shared fixtures: an in-memory document store for pipeline tests."""
import copy

import pytest

from storage.document_store import StoredDocument


class InMemoryDocument:
    def __init__(self, collection, doc_id):
        self.collection = collection
        self.doc_id = doc_id
    
    def get(self):
        data = self.collection.documents.get(self.doc_id)
        return copy.deepcopy(data)
    
    def set(self, data):
        self.collection.documents[self.doc_id] = copy.deepcopy(data)
    
    def delete(self):
        self.collection.documents.pop(self.doc_id, None)


class InMemoryCollection:
    def __init__(self, name):
        self.name = name
        self.documents = {}
    
    def doc(self, doc_id):
        return InMemoryDocument(self, doc_id)
    
    def get(self):
        return [
            StoredDocument(doc_id=doc_id, data=copy.deepcopy(data))
            for doc_id, data in self.documents.items()
        ]
    
    def keys(self):
        return set(self.documents)
    
    def set_many(self, documents):
        for doc_id, data in documents.items():
            self.doc(doc_id).set(data)
        return len(documents)
    
    def delete_many(self, doc_ids):
        doc_ids = list(doc_ids)
        for doc_id in doc_ids:
            self.doc(doc_id).delete()
        return len(doc_ids)


class InMemoryStore:
    """Stand-in for DocumentStore with the same collection/doc interface."""
    
    def __init__(self):
        self.collections = {}
    
    def collection(self, name):
        if name not in self.collections:
            self.collections[name] = InMemoryCollection(name)
        return self.collections[name]


@pytest.fixture
def memory_store():
    """Create an empty in-memory store."""
    return InMemoryStore()


@pytest.fixture
def category_colors():
    """Sample category color table."""
    return {
        'Lecture': 'blue',
        'Athletics': 'purple',
        'Default': 'gray'
    }
