from .user import User
from .buyer import Buyer
from .buyer_history import BuyerHistory

__all__ = ["User", "Buyer", "BuyerHistory"]
