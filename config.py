import os
from decimal import Decimal
from dotenv import load_dotenv

# Загрузка .env
load_dotenv()

# База данных (по умолчанию in-memory, состояние живет пока жив движок)
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite://")
SQL_ECHO = os.getenv("SQL_ECHO", "0") == "1"

# Логирование
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Размещение
# bubble_up, direct_sponsor, spillover, flat
PLACEMENT_POLICY = os.getenv("PLACEMENT_POLICY", "bubble_up")

# Дублировать нового участника в матрицу рекрутера
MIRROR_TO_RECRUITER = os.getenv("MIRROR_TO_RECRUITER", "1") == "1"

# Доходы
# payline, flat
EARNINGS_FORMULA = os.getenv("EARNINGS_FORMULA", "payline")
FLAT_EARNINGS_PER_MEMBER = Decimal(os.getenv("FLAT_EARNINGS_PER_MEMBER", "30"))

# Экспорт
MATRIX_TYPE = "2x2 Personal Matrix System"
