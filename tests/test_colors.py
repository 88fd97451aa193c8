"""Unit tests for category color lookup."""
from normalizer.colors import load_category_colors, resolve_header_color


def test_resolve_mapped_category(category_colors):
    assert resolve_header_color(category_colors, 'Athletics') == 'purple'


def test_resolve_unmapped_category_uses_default(category_colors):
    assert resolve_header_color(category_colors, 'Film') == 'gray'
    assert resolve_header_color(category_colors, None) == 'gray'


def test_resolve_without_default():
    assert resolve_header_color({'Lecture': 'blue'}, 'Film') is None


def test_load_category_colors(memory_store, category_colors):
    """Test the table is read from resources/categoryColors."""
    memory_store.collection('resources').doc('categoryColors').set(category_colors)
    
    assert load_category_colors(memory_store) == category_colors


def test_load_category_colors_missing_document(memory_store):
    """Test a missing table yields an empty mapping."""
    assert load_category_colors(memory_store) == {}
