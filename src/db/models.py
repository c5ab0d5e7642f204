# Import all models here for Alembic to discover them
from src.db.base import Base
from src.models.user import User
from src.models.board import Board
from src.models.column import Column
from src.models.card import Card
from src.models.token import PersonalAccessToken
from src.models.history import CardHistory, HistoryAction
