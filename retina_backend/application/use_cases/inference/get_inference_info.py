# Local application imports
from ....infrastructure.external.connection_diagnostics import ConnectionDiagnostics
from ...dto.inference_dto import InferenceInfoResponse


class GetInferenceInfoUseCase:
    """Use case for reading the primary inference endpoint's info document"""

    def __init__(self, diagnostics: ConnectionDiagnostics) -> None:
        self.diagnostics = diagnostics

    async def execute(self) -> InferenceInfoResponse:
        report = await self.diagnostics.fetch_primary_info()
        return InferenceInfoResponse(**report)
