from .subscription import Subscription
from .user import User
from .medication import Medication
from .reading import BloodPressureReading
from .diabetic_reading import DiabeticReading
from .emergency_contact import EmergencyContact
from .password_reset import PasswordReset
from .rate_limit_entry import RateLimitEntry
