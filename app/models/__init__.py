from app.models.user import User
from app.models.business import BusinessProfile
from app.models.inventory import InventoryItem
from app.models.invoice import Invoice, InvoiceItem
