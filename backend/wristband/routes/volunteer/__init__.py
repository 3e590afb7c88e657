"""
Volunteer portal routes.
"""
from flask import Blueprint

volunteer_bp = Blueprint('volunteer', __name__)


# Import submodules to register routes on volunteer_bp
from . import auth         # noqa: E402, F401
from . import dashboard    # noqa: E402, F401
from . import assignments  # noqa: E402, F401
