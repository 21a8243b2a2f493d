# V1 API routes
from . import availability as availability, booking_sessions as booking_sessions
