"""Unit tests for the daily message normalizer."""
from normalizer.announcements import normalize_announcements


def make_entry(entry_id, entry_type='announcement', **overrides):
    """Build an upstream daily message entry."""
    entry = {
        'ID': entry_id,
        'type': entry_type,
        'category': 'Lecture',
        'title': 'Library Hours',
        'post_content': 'Open &amp; staffed',
        'venue': 'Sawyer'
    }
    entry.update(overrides)
    return entry


def test_normalize_announcements_basic(category_colors):
    """Test entries are keyed by string ID with stored field names."""
    payload = {'Lecture': [make_entry(11)]}
    
    result = normalize_announcements(payload, category_colors)
    
    assert result == {
        '11': {
            'key': '11',
            'category': 'Lecture',
            'title': 'Library Hours',
            'information': 'Open & staffed',
            'location': 'Sawyer',
            'headerColor': 'blue'
        }
    }


def test_event_entries_excluded(category_colors):
    """Test entries typed as events never appear in the output."""
    payload = {
        'Lecture': [make_entry(1, entry_type='event'), make_entry(2)],
        'Athletics': [make_entry(3, entry_type='event', category='Athletics')]
    }
    
    result = normalize_announcements(payload, category_colors)
    
    assert list(result) == ['2']


def test_header_color_falls_back_to_default(category_colors):
    """Test unmapped categories use the Default color."""
    payload = {'Misc': [make_entry(5, category='Misc')]}
    
    result = normalize_announcements(payload, category_colors)
    
    assert result['5']['headerColor'] == 'gray'


def test_duplicate_ids_last_write_wins(category_colors):
    """Test a repeated ID keeps the entry seen last."""
    payload = {
        'Lecture': [make_entry(9, title='First')],
        'Athletics': [make_entry(9, title='Second', category='Athletics')]
    }
    
    result = normalize_announcements(payload, category_colors)
    
    assert len(result) == 1
    assert result['9']['title'] == 'Second'
    assert result['9']['headerColor'] == 'purple'


def test_missing_text_fields(category_colors):
    """Test missing optional fields become empty strings."""
    payload = {'Lecture': [make_entry(4, title=None, venue=None, post_content=None)]}
    
    result = normalize_announcements(payload, category_colors)
    
    assert result['4']['title'] == ''
    assert result['4']['location'] == ''
    assert result['4']['information'] == ''


def test_empty_payloads(category_colors):
    """Test empty or list payloads produce an empty mapping."""
    assert normalize_announcements({}, category_colors) == {}
    assert normalize_announcements([], category_colors) == {}
    assert normalize_announcements({'Lecture': None}, category_colors) == {}
