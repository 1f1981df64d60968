"""Wire contracts shared by the Salesforce service and its SDK."""

from .account import Account, BillingAddress, CreateAccountInput, UpdateAccountInput
from .auth import AuthResponse, AuthUser, LoginRequest, RegisterRequest
from .cart import AddToCartInput, Cart, CartItem, CreateCartInput, RemoveFromCartInput
from .common import ListResponse, Pagination
from .contact import Contact, CreateContactInput, UpdateContactInput

__all__ = [
    "Account",
    "AddToCartInput",
    "AuthResponse",
    "AuthUser",
    "BillingAddress",
    "Cart",
    "CartItem",
    "Contact",
    "CreateAccountInput",
    "CreateCartInput",
    "CreateContactInput",
    "ListResponse",
    "LoginRequest",
    "Pagination",
    "RegisterRequest",
    "RemoveFromCartInput",
    "UpdateAccountInput",
    "UpdateContactInput",
]
