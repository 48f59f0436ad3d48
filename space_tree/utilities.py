"""utilities.py - Assorted Helper Functions"""

__all__ = ['sequence_to_index']

def sequence_to_index(value: str) -> list[int]:
    """Converts cardinal axis string sequence to list of axis indices"""
    mapping = {'x': 0, 'y': 1, 'z': 2}
    return [mapping[c] for c in value.lower()]
