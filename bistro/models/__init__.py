from bistro.models.category import Category
from bistro.models.menu_item import MenuItem
from bistro.models.order import Order
from bistro.models.order_item import OrderItem
from bistro.models.order_audit_log import OrderAuditLog
from bistro.models.store_settings import StoreSettings
from bistro.models.table import DiningTable
from bistro.models.staff import StaffMember
from bistro.models.cart import Cart
