from .users import User  # noqa: F401
from .industry_insight import IndustryInsight  # noqa: F401
