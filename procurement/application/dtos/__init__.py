"""Application DTOs: commands and read models passed across layer boundaries."""

from procurement.application.dtos.combined_request import (
    CombineCommand,
    CombinedRequestSummary,
    CombineResult,
)
from procurement.application.dtos.idea import CreateIdeaCommand, IdeaView
from procurement.application.dtos.request import (
    ActCommand,
    CreateRequestCommand,
    DepartmentResult,
    RequestItemInput,
    SpendRecord,
    UpdateRequestCommand,
    UserResult,
)

__all__ = [
    "ActCommand",
    "CombineCommand",
    "CombineResult",
    "CombinedRequestSummary",
    "CreateIdeaCommand",
    "CreateRequestCommand",
    "DepartmentResult",
    "IdeaView",
    "RequestItemInput",
    "SpendRecord",
    "UpdateRequestCommand",
    "UserResult",
]
