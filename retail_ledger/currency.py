"""
Money Module

Fixed-point currency values held as integer cents. NEVER uses float for
monetary values; percentage math goes through Decimal and is rounded
half-up to a whole cent.
"""

from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from dataclasses import dataclass
from typing import Union
import re


CENTS_PER_DOLLAR = 100


@dataclass(frozen=True)
class Money:
    """
    Immutable money amount in cents.
    The value may be negative (overdrafts); callers that need a
    non-negative input validate it themselves.
    """
    cents: int
    
    def __post_init__(self):
        # bool is an int subclass but never a valid amount
        if isinstance(self.cents, bool) or not isinstance(self.cents, int):
            raise TypeError(f"Money requires integer cents, got {type(self.cents).__name__}")
    
    @classmethod
    def zero(cls) -> 'Money':
        return cls(0)
    
    @classmethod
    def from_decimal(cls, dollars: Union[Decimal, int, str]) -> 'Money':
        """Build Money from a dollar amount, rounding half-up to the cent"""
        if not isinstance(dollars, Decimal):
            dollars = Decimal(str(dollars))
        cents = (dollars * CENTS_PER_DOLLAR).quantize(Decimal('1'), rounding=ROUND_HALF_UP)
        return cls(int(cents))
    
    @classmethod
    def parse(cls, value: str) -> 'Money':
        """Parse a dollar string such as '$20,000.00'"""
        return cls.from_decimal(decimal_from_string(value))
    
    def _check(self, other) -> 'Money':
        if not isinstance(other, Money):
            raise TypeError(f"Cannot combine Money with {type(other).__name__}")
        return other
    
    def __add__(self, other: 'Money') -> 'Money':
        return Money(self.cents + self._check(other).cents)
    
    def __sub__(self, other: 'Money') -> 'Money':
        return Money(self.cents - self._check(other).cents)
    
    def __neg__(self) -> 'Money':
        return Money(-self.cents)
    
    def __abs__(self) -> 'Money':
        return Money(abs(self.cents))
    
    def __lt__(self, other: 'Money') -> bool:
        return self.cents < self._check(other).cents
    
    def __le__(self, other: 'Money') -> bool:
        return self.cents <= self._check(other).cents
    
    def __gt__(self, other: 'Money') -> bool:
        return self.cents > self._check(other).cents
    
    def __ge__(self, other: 'Money') -> bool:
        return self.cents >= self._check(other).cents
    
    def is_zero(self) -> bool:
        """Check if amount is exactly zero"""
        return self.cents == 0
    
    def is_positive(self) -> bool:
        """Check if amount is positive"""
        return self.cents > 0
    
    def is_negative(self) -> bool:
        """Check if amount is negative"""
        return self.cents < 0
    
    def percent(self, rate: Union[Decimal, int, str]) -> 'Money':
        """
        Compute ``rate`` percent of this amount
        
        Args:
            rate: Percentage, e.g. Decimal('0.25') for a quarter percent
            
        Returns:
            Money rounded half-up to a whole cent
        """
        if not isinstance(rate, Decimal):
            rate = Decimal(str(rate))
        exact = Decimal(self.cents) * rate / Decimal(100)
        return Money(int(exact.quantize(Decimal('1'), rounding=ROUND_HALF_UP)))
    
    def to_decimal(self) -> Decimal:
        """Dollar value as a two-place Decimal"""
        return (Decimal(self.cents) / CENTS_PER_DOLLAR).quantize(Decimal('0.01'))
    
    def to_string(self) -> str:
        """Format for display"""
        sign = "-" if self.cents < 0 else ""
        return f"{sign}${abs(self.to_decimal()):,.2f}"
    
    def __str__(self) -> str:
        return self.to_string()


def decimal_from_string(value: str) -> Decimal:
    """
    Safely convert a dollar string to Decimal, handling common formats
    
    Args:
        value: String representation of number, optionally with '$' and
            thousands separators
        
    Returns:
        Decimal value
        
    Raises:
        ValueError: If string cannot be converted to valid Decimal
    """
    if not value or not isinstance(value, str):
        raise ValueError("Value must be a non-empty string")
    
    # Remove currency symbols and whitespace
    clean_value = re.sub(r'[^\d.,\-+]', '', value.strip())
    clean_value = clean_value.replace(',', '')
    
    try:
        return Decimal(clean_value)
    except InvalidOperation:
        raise ValueError(f"Cannot convert '{value}' to Decimal")
