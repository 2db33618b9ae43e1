from enum import Enum


class FileType(str, Enum):
    """Sub-folders of the upload directory."""
    AVATAR = "avatars"        # user profile pictures
    THUMBNAILS = "courses"    # course cover images


class PaymentType(str, Enum):
    COURSE_PURCHASE = "course_purchase"
    PREMIUM_SUBSCRIPTION = "premium_subscription"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class RevenuePeriod(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class CourseStatusFilter(str, Enum):
    ALL = "all"
    APPROVED = "approved"
    PENDING = "pending"
    ACTIVE = "active"
    INACTIVE = "inactive"
