# pavilion/models/__init__.py
from pavilion.models.user_models import User
from pavilion.models.catalog_models import Category, SubCategory, Brand, Tag, Product
from pavilion.models.customer_models import CustomerType, Customer, CustomerContact
from pavilion.models.quotation_models import Quotation, QuotationItem
from pavilion.models.order_models import Order, OrderItem
from pavilion.models.activity_models import ActivityLog
from pavilion.models.enquiry_models import Enquiry
