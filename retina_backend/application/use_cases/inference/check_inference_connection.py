# Local application imports
from ....infrastructure.external.connection_diagnostics import ConnectionDiagnostics
from ...dto.inference_dto import ConnectionTestResponse


class CheckInferenceConnectionUseCase:
    """Use case for the operator-facing inference connection test"""

    def __init__(self, diagnostics: ConnectionDiagnostics) -> None:
        self.diagnostics = diagnostics

    async def execute(self) -> ConnectionTestResponse:
        report = await self.diagnostics.test_connection()
        return ConnectionTestResponse(**report)
