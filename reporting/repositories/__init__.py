"""Repository mixins composed into DuckDBRecordSource."""
from reporting.repositories.sales import SalesMixin
from reporting.repositories.products import ProductsMixin
from reporting.repositories.customers import CustomersMixin
from reporting.repositories.expenses import ExpensesMixin

__all__ = ["SalesMixin", "ProductsMixin", "CustomersMixin", "ExpensesMixin"]
