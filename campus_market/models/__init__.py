from .category import Category, CategoryCreate, CategoryKind, Subcategory, SubcategoryCreate
from .contact import ContactStatus, ContactStatusUpdate, ContactSubmission, ContactSubmissionCreate
from .image_data import ImageData, ImagePackaging
from .listing import (
    ContactLinks,
    EngagementAction,
    EngagementResult,
    House,
    HouseCreate,
    Listing,
    ListingDetail,
    ListingKind,
    PriceRange,
    Product,
    ProductCreate,
    Service,
    ServiceCreate,
)
from .message import ChatMessage, ChatMessageCreate
from .profile import PasswordResetRequest, Profile, ProfileUpdate, SignupRequest
from .role import SIGNUP_ROLES, Role, RoleMember, RoleRoster, UserRole, Viewer

__all__ = [
    "Category",
    "CategoryCreate",
    "CategoryKind",
    "Subcategory",
    "SubcategoryCreate",
    "ContactStatus",
    "ContactStatusUpdate",
    "ContactSubmission",
    "ContactSubmissionCreate",
    "ImageData",
    "ImagePackaging",
    "ContactLinks",
    "EngagementAction",
    "EngagementResult",
    "House",
    "HouseCreate",
    "Listing",
    "ListingDetail",
    "ListingKind",
    "PriceRange",
    "Product",
    "ProductCreate",
    "Service",
    "ServiceCreate",
    "ChatMessage",
    "ChatMessageCreate",
    "PasswordResetRequest",
    "Profile",
    "ProfileUpdate",
    "SignupRequest",
    "SIGNUP_ROLES",
    "Role",
    "RoleMember",
    "RoleRoster",
    "UserRole",
    "Viewer",
]
