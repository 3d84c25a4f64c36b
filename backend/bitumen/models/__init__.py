from .auth import User, SessionToken, UserPermission
from .clients import Client, CreditAgreement, SalesRate, ClientCategory, CompanyType, BankInterestMode
from .orders import Order, Payment, EwayBill, PurchaseOrder, ClientTracking, OrderStatus, PaymentStatus, TrackingStatus
from .tasks import Task, FollowUp, TaskType, TaskPriority, TaskStatus, FollowUpStatus
from .tours import TourAdvance, TravelMode, TourAdvanceStatus
from .quotations import Quotation, QuotationItem, QuotationStatus

__all__ = [
    'User', 'SessionToken', 'UserPermission',
    'Client', 'CreditAgreement', 'SalesRate', 'ClientCategory', 'CompanyType', 'BankInterestMode',
    'Order', 'Payment', 'EwayBill', 'PurchaseOrder', 'ClientTracking', 'OrderStatus', 'PaymentStatus', 'TrackingStatus',
    'Task', 'FollowUp', 'TaskType', 'TaskPriority', 'TaskStatus', 'FollowUpStatus',
    'TourAdvance', 'TravelMode', 'TourAdvanceStatus',
    'Quotation', 'QuotationItem', 'QuotationStatus',
]
