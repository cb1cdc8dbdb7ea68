from formforge.db.models.form import Form
from formforge.db.models.submission import Submission

__all__ = ["Form", "Submission"]
