from mentorhub.models import ReportModel
from mentorhub.rbac import ResourceType
from mentorhub.routes.submissions import make_submission_blueprint
from mentorhub.schemas import ReportCreate, ReportUpdate

bp = make_submission_blueprint('reports', ResourceType.REPORT, ReportModel,
                               ReportCreate, ReportUpdate, 'Report', update_route=True)
