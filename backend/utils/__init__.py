import enum
from sqlalchemy.orm import class_mapper
from .formatting import to_money, to_quantity, format_currency

def sqlalchemy_to_dict(obj):
    """Convert a SQLAlchemy object to a JSON-safe dictionary (used for audit log snapshots)."""
    if not obj:
        return None
    mapper = class_mapper(obj.__class__)
    result = {}
    for c in mapper.columns:
        value = getattr(obj, c.key)
        # Convert date/datetime objects to ISO format strings
        if hasattr(value, 'isoformat'):
            value = value.isoformat()
        # Decimals are kept exact as strings
        elif hasattr(value, 'normalize') and hasattr(value, 'from_float'):
            value = str(value)
        elif isinstance(value, enum.Enum):
            value = value.value
        result[c.key] = value
    return result

__all__ = ['sqlalchemy_to_dict', 'to_money', 'to_quantity', 'format_currency']
