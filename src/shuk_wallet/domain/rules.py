from src.shuk_common.errors import InsufficientFundsError, InvalidAmountError


def check_positive_amount(amount: int) -> None:
    """Raise InvalidAmountError unless amount is a positive int of cents."""
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        raise InvalidAmountError(amount)


def check_funds(balance: int, required: int) -> None:
    """Raise InsufficientFundsError if balance cannot cover required."""
    if balance < required:
        raise InsufficientFundsError(required, balance)
