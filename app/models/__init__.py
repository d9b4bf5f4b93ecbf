"""
모델 패키지
"""

from .user import User
from .activity_log import ActivityLog
from .banner import Banner
from .spot import Spot
from .include_item import IncludeItem
from .product import Product
from .booking import Booking, BookingSequence, WorkflowHistory
from .collaboration import CollaborationRequest
from .poster import Poster
from .travel_agent import TravelAgent
from .email_history import EmailHistory
from .content import Content
from .site_config import SiteConfig

__all__ = [
    "User",
    "ActivityLog",
    "Banner",
    "Spot",
    "IncludeItem",
    "Product",
    "Booking",
    "BookingSequence",
    "WorkflowHistory",
    "CollaborationRequest",
    "Poster",
    "TravelAgent",
    "EmailHistory",
    "Content",
    "SiteConfig",
]
