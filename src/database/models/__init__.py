from src.database.models.base import Base
from src.database.models.partner import PartnerOrm
from src.database.models.revenue import RevenueOrm
from src.database.models.user import UserOrm
