import uuid
from datetime import datetime


def generate_simulation_id() -> str:
    return f"SIM-{datetime.now().strftime('%Y%m%d%H%M%S')}-{uuid.uuid4().hex[:4]}"
