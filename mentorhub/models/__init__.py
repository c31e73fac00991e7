from .models import (
    UserModel, OtpModel, ProjectModel, ReportModel, TestModel,
    QuestionModel, ResourceModel, UserTestResultModel, model_to_dict
)

__all__ = [
    'UserModel',
    'OtpModel',
    'ProjectModel',
    'ReportModel',
    'TestModel',
    'QuestionModel',
    'ResourceModel',
    'UserTestResultModel',
    'model_to_dict',
]
