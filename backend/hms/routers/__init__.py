# Console Routers
from hms.routers import auth, bookings, dashboard, finance, guests, rooms, super_admin

__all__ = ['auth', 'bookings', 'dashboard', 'finance', 'guests', 'rooms', 'super_admin']
