from .encryption import encrypt_phi, decrypt_phi, hash_email
from .audit_logger import audit_log, audit_phi_access
from .auth import generate_token, patient_required, volunteer_required
from .validators import validate_vital_signs, parse_ingest_params
from .rate_limiter import rate_limit
