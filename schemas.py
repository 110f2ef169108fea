"""
Data Schemas for the Storefront Back-Office

Each Pydantic model below represents a record held by the in-memory stores
in database.py, or a request/response body of the API.

This storefront covers:
- Products (catalog with stock on hand)
- Transactions (sales with snapshotted line items, manual income/expense)
- Cart lines (ephemeral, bounded by product stock)
- Financial report (income, expenses, net profit)
"""

from pydantic import BaseModel, Field
from typing import Optional, List, Literal, Union
from datetime import datetime

from seed_data import PLACEHOLDER_IMAGE


TransactionStatus = Literal["Pending", "Completed", "Cancelled"]
TransactionType = Literal["sale", "income", "expense"]


class Product(BaseModel):
    id: str = Field(..., description="Unique product id")
    name: str = Field(..., description="Product name")
    description: str = Field("", description="Product description")
    price: float = Field(..., ge=0, description="Unit sale price")
    category: str = Field(..., description="Category name")
    image_url: str = Field("", description="Web URL or data URI of the product image")
    stock: int = Field(0, ge=0, description="Quantity on hand")
    data_ai_hint: Optional[str] = Field(None, description="Keywords for image search")


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: str = ""
    price: float = Field(..., gt=0)
    category: str = Field(..., min_length=1)
    image_url: str = PLACEHOLDER_IMAGE
    stock: int = Field(0, ge=0)
    data_ai_hint: Optional[str] = None


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    price: Optional[float] = Field(None, gt=0)
    category: Optional[str] = Field(None, min_length=1)
    image_url: Optional[str] = None
    stock: Optional[int] = Field(None, ge=0)
    data_ai_hint: Optional[str] = None


class Restock(BaseModel):
    quantity: int = Field(..., ge=1, description="Units added to stock")


class ProductImportRow(BaseModel):
    """One spreadsheet row; price and stock arrive raw and are parsed by the importer."""
    name: Optional[str] = None
    price: Optional[Union[int, float, str]] = None
    stock: Optional[Union[int, float, str]] = None
    description: Optional[str] = None
    data_ai_hint: Optional[str] = None


class TransactionItem(BaseModel):
    """Snapshot of a product's name and price at transaction time."""
    product_id: str = Field(..., description="Product id")
    name: str = Field(..., description="Product name snapshot")
    quantity: int = Field(..., description="Quantity sold")
    price: float = Field(..., ge=0, description="Unit price at time of sale")

    model_config = {"frozen": True}


class Transaction(BaseModel):
    id: str
    date: datetime
    items: List[TransactionItem] = Field(default_factory=list)
    total_amount: float = Field(..., description="Sale total, or signed manual amount")
    status: TransactionStatus = "Completed"
    type: TransactionType
    description: Optional[str] = None
    category: Optional[str] = None


class OrderLine(BaseModel):
    product_id: str
    quantity: int


class PlaceOrder(BaseModel):
    lines: List[OrderLine]
    description: Optional[str] = None


class EditOrder(BaseModel):
    items: List[TransactionItem]


class Checkout(BaseModel):
    name: str = Field(..., min_length=1, description="Customer name")
    address: str = Field(..., min_length=1, description="Shipping address")
    email: str = Field(..., min_length=1, description="Contact email")
    payment_method: str = Field("cash", description="Payment method label")


class CartItemIn(BaseModel):
    product_id: str
    quantity: int = Field(1, ge=1)


class CartQuantity(BaseModel):
    quantity: int


class CartLine(BaseModel):
    product: Product
    quantity: int = Field(..., gt=0)


class ManualRecord(BaseModel):
    type: Literal["income", "expense"]
    amount: float
    description: str
    category: str


class FinancialReport(BaseModel):
    total_income: float
    total_expenses: float
    net_profit: float
    period: str = "All Time"
