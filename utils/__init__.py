from .coercion import to_decimal, to_decimal_or_none, to_iso_date, to_text

__all__ = ['to_decimal', 'to_decimal_or_none', 'to_iso_date', 'to_text']
