# Import every model so Base.metadata knows all tables
from regionhub.models.users import User, Address
from regionhub.models.vendor import Vendor, VendorStatus
from regionhub.models.delivery import DeliveryAgent, AgentStatus
from regionhub.models.product import Category, Product, Gallery
from regionhub.models.stock import StockEntry
from regionhub.models.order import Order, OrderStatus
from regionhub.models.cart import CartItem, CartItemStatus
from regionhub.models.complaint import Complaint, ComplaintStatus
from regionhub.models.review import Review
from regionhub.models.log import Log
