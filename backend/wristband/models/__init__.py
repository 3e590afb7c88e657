from .reading import Reading, WristbandReading, ImmutableReadingError
from .user import User
from .user_profile import UserProfile
from .volunteer import Volunteer, VolunteerAssignment
from .revoked_token import RevokedToken
from .rate_limit_entry import RateLimitEntry
