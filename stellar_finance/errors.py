# stellar_finance/errors.py


class StellarFinanceError(Exception):
    """Raíz de todos los errores del proyecto."""


class MissingCredentialError(StellarFinanceError):
    """Falta OPENAI_API_KEY: error fatal al inicializar."""


class AdvisorError(StellarFinanceError):
    """Fallo al pedir un plan al modelo (red, JSON inválido o forma incorrecta).

    El usuario ve el mismo banner para cualquiera de las tres causas.
    """


class PlanGenerationError(AdvisorError):
    pass


class PlanRecalculationError(AdvisorError):
    pass


class PlannerBusyError(StellarFinanceError):
    """Ya hay una petición de plan o recálculo en curso."""


class ChatSessionNotFound(StellarFinanceError):
    pass


class ChatBusyError(StellarFinanceError):
    """La sesión de chat aún está recibiendo la respuesta anterior."""


class ChatStreamError(StellarFinanceError):
    """Falló el streaming; el mensaje del bot ya quedó reemplazado por el texto de error."""


class VehicleNotFound(StellarFinanceError):
    """El vehículo seleccionado no está en la respuesta actual."""
