# Console View Services
from hms.services.auth_service import AuthService
from hms.services.booking_service import BookingService
from hms.services.dashboard_service import DashboardService
from hms.services.finance_service import FinanceService
from hms.services.guest_service import GuestService
from hms.services.hotel_admin_service import HotelAdminService
from hms.services.monitoring_service import MonitoringService
from hms.services.room_service import RoomService
from hms.services.settings_service import SettingsService
from hms.services.user_admin_service import UserAdminService

__all__ = [
    'AuthService', 'BookingService', 'DashboardService', 'FinanceService', 'GuestService',
    'HotelAdminService', 'MonitoringService', 'RoomService', 'SettingsService', 'UserAdminService',
]
