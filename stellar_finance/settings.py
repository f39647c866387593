# stellar_finance/settings.py
# Plazos permitidos (meses), los mismos del selector de la UI
TERM_OPTIONS = [36, 48, 60, 72]
DEFAULT_TERM = 60

# Rangos de los sliders del formulario (min, max, step)
MONTHLY_INCOME_RANGE = (1000, 20000, 250)
DOWN_PAYMENT_RANGE = (0, 50000, 500)

DEFAULT_MONTHLY_INCOME = 5000
DEFAULT_DOWN_PAYMENT = 5000

# Cantidad de modelos que pedimos al LLM
SUGGESTED_MODEL_COUNT = 3
