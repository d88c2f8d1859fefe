"""Constants for inference service payload field names"""


class InferenceInfoFields:
    """Field names returned by the inference service info route (GET /)"""
    STATUS = "status"
    SERVICE = "service"
    MODEL_NAME = "model_name"
    CLASSES = "classes"
    API_VERSION = "api_version"
    MODEL_LOADED = "model_loaded"
    SIMULATION_MODE_ENABLED = "simulation_mode_enabled"

    # Values marking a live service
    STATUS_ONLINE = "online"
    SERVICE_NAME = "retinopathy-api"


class PredictionFields:
    """Field names used by the predict routes"""
    CLASS = "class"
    CONFIDENCE = "confidence"
    IS_SIMULATION = "is_simulation"

    # Request fields
    FILE = "file"
    IMAGE_DATA = "image_data"


class InferenceRoutes:
    """Relative routes on an inference service base URL"""
    INFO = "/"
    PREDICT = "/predict"
    PREDICT_BASE64 = "/predict-base64"
