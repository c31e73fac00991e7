from mentorhub.models import ProjectModel
from mentorhub.rbac import ResourceType
from mentorhub.routes.submissions import make_submission_blueprint
from mentorhub.schemas import ProjectCreate, ProjectUpdate

bp = make_submission_blueprint('projects', ResourceType.PROJECT, ProjectModel,
                               ProjectCreate, ProjectUpdate, 'Project')
