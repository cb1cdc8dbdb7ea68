from formforge.controllers.forms import FormsController
from formforge.controllers.submissions import SubmissionsController

__all__ = ["FormsController", "SubmissionsController"]
