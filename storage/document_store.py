"""DynamoDB-backed document store with collection/document semantics."""
import json
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Set

import boto3
from boto3.dynamodb.conditions import Key
from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)


@dataclass
class StoredDocument:
    """A document read back from a collection."""
    doc_id: str
    data: Any


class DocumentStore:
    """Document store laid out in one DynamoDB table.
    
    Items are keyed by ``collection`` (partition key) and ``doc_id`` (sort
    key); the document body lives in the ``data`` attribute.
    """
    
    def __init__(self, table_name: str, dynamodb=None):
        """
        Initialize DynamoDB client and table reference.
        
        Args:
            table_name: Name of the DynamoDB table
            dynamodb: Optional boto3 DynamoDB resource
        """
        self.table_name = table_name
        self.dynamodb = dynamodb or boto3.resource('dynamodb')
        self.table = self.dynamodb.Table(table_name)
        logger.info(f"Initialized DocumentStore for table: {table_name}")
    
    def collection(self, name: str) -> 'Collection':
        return Collection(self.table, name)


class Collection:
    """A named group of documents."""
    
    BATCH_SIZE = 25  # DynamoDB batch operation limit
    
    def __init__(self, table, name: str):
        self.table = table
        self.name = name
    
    def doc(self, doc_id: str) -> 'Document':
        return Document(self.table, self.name, doc_id)
    
    def get(self) -> List[StoredDocument]:
        """
        Retrieve every document in the collection.
        
        Returns:
            List of StoredDocument objects
        """
        logger.info(f"Querying DynamoDB for collection: {self.name}")
        
        try:
            # Query the partition (paginated by LastEvaluatedKey)
            response = self.table.query(
                KeyConditionExpression=Key('collection').eq(self.name)
            )
            items = response.get('Items', [])
            
            # Handle pagination
            while 'LastEvaluatedKey' in response:
                response = self.table.query(
                    KeyConditionExpression=Key('collection').eq(self.name),
                    ExclusiveStartKey=response['LastEvaluatedKey']
                )
                items.extend(response.get('Items', []))
            
        except ClientError as e:
            logger.error(f"Error querying collection {self.name}: {e}")
            raise
        
        documents = [
            StoredDocument(doc_id=item['doc_id'], data=from_dynamodb(item.get('data')))
            for item in items
        ]
        logger.info(f"Retrieved {len(documents)} documents from {self.name}")
        return documents
    
    def keys(self) -> Set[str]:
        """
        Retrieve the IDs of every document without loading their bodies.
        
        Returns:
            Set of document IDs
        """
        query_args = {
            'KeyConditionExpression': Key('collection').eq(self.name),
            'ProjectionExpression': 'doc_id'
        }
        
        try:
            response = self.table.query(**query_args)
            doc_ids = {item['doc_id'] for item in response.get('Items', [])}
        
            while 'LastEvaluatedKey' in response:
                response = self.table.query(
                    ExclusiveStartKey=response['LastEvaluatedKey'],
                    **query_args
                )
                doc_ids.update(item['doc_id'] for item in response.get('Items', []))
        
        except ClientError as e:
            logger.error(f"Error querying keys of collection {self.name}: {e}")
            raise
        
        logger.info(f"Retrieved {len(doc_ids)} document keys from {self.name}")
        return doc_ids
    
    def set_many(self, documents: Dict[str, Any]) -> int:
        """
        Write documents in batches of 25 items, replacing existing ones.
        
        Args:
            documents: Mapping of document ID to document body
            
        Returns:
            Count of successfully written documents
        """
        if not documents:
            return 0
        
        logger.info(f"Writing {len(documents)} documents to {self.name}")
        entries = list(documents.items())
        success_count = 0
        
        # Process in batches of 25 (DynamoDB limit)
        for i in range(0, len(entries), self.BATCH_SIZE):
            batch = entries[i:i + self.BATCH_SIZE]
            
            try:
                with self.table.batch_writer() as writer:
                    for doc_id, data in batch:
                        writer.put_item(Item=_to_item(self.name, doc_id, data))
                success_count += len(batch)
                        
            except ClientError as e:
                logger.error(
                    f"Error writing batch {i // self.BATCH_SIZE + 1} to {self.name}: {e}"
                )
                # Continue processing remaining batches
                continue
        
        logger.info(f"Successfully wrote {success_count} documents to {self.name}")
        return success_count
    
    def delete_many(self, doc_ids: Iterable[str]) -> int:
        """
        Delete documents in batches of 25 items.
        
        Args:
            doc_ids: Document IDs to delete
            
        Returns:
            Count of successfully deleted documents
        """
        doc_ids = list(doc_ids)
        if not doc_ids:
            return 0
        
        logger.info(f"Deleting {len(doc_ids)} documents from {self.name}")
        success_count = 0
        
        for i in range(0, len(doc_ids), self.BATCH_SIZE):
            batch = doc_ids[i:i + self.BATCH_SIZE]
            
            try:
                with self.table.batch_writer() as writer:
                    for doc_id in batch:
                        writer.delete_item(Key={'collection': self.name, 'doc_id': doc_id})
                success_count += len(batch)
                        
            except ClientError as e:
                logger.error(
                    f"Error deleting batch {i // self.BATCH_SIZE + 1} from {self.name}: {e}"
                )
                continue
        
        logger.info(f"Successfully deleted {success_count} documents from {self.name}")
        return success_count


class Document:
    """Reference to a single document."""
    
    def __init__(self, table, collection: str, doc_id: str):
        self.table = table
        self.collection = collection
        self.doc_id = doc_id
    
    def get(self) -> Optional[Any]:
        """Return the document body, or None if it does not exist."""
        response = self.table.get_item(
            Key={'collection': self.collection, 'doc_id': self.doc_id}
        )
        item = response.get('Item')
        if item is None:
            return None
        return from_dynamodb(item.get('data'))
    
    def set(self, data: Any) -> None:
        """Replace the document body."""
        self.table.put_item(Item=_to_item(self.collection, self.doc_id, data))
        logger.info(f"Wrote document {self.collection}/{self.doc_id}")
    
    def delete(self) -> None:
        self.table.delete_item(
            Key={'collection': self.collection, 'doc_id': self.doc_id}
        )
        logger.info(f"Deleted document {self.collection}/{self.doc_id}")


def _to_item(collection: str, doc_id: str, data: Any) -> dict:
    """
    Convert a document body to a DynamoDB item.
    
    DynamoDB rejects Python floats, so numbers round-trip through Decimal.
    """
    return {
        'collection': collection,
        'doc_id': doc_id,
        'data': json.loads(json.dumps(data), parse_float=Decimal)
    }


def from_dynamodb(value: Any) -> Any:
    """Convert DynamoDB Decimals back into ints and floats."""
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, dict):
        return {k: from_dynamodb(v) for k, v in value.items()}
    if isinstance(value, list):
        return [from_dynamodb(v) for v in value]
    return value
