from formforge.db.services import export_service, form_service, submission_service
from formforge.db.services.pagination import Paginated

__all__ = ["Paginated", "export_service", "form_service", "submission_service"]
