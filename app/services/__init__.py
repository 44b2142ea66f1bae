from app.services.engine import submit_scenario
from app.services.scoring import compute_score
from app.services.seeding import seed_catalog

__all__ = ["compute_score", "seed_catalog", "submit_scenario"]
