from typing import Dict

DEFAULT_API_URL = "http://localhost:8080/api"
API_URL_ENV = "THERMAFLOW_API_URL"
REQUEST_TIMEOUT = 30

JSON_HEADERS: Dict[str, str] = {
    "Accept": "application/json",
    "Content-Type": "application/json"
}

# new step defaults
STEP_NAME_TEMPLATE = "Round {number}"
DEFAULT_DURATION_SECONDS = 300
DEFAULT_HEAT_INTENSITY = 5
DEFAULT_SCENT_DOSAGE_ML = 50

EDITABLE_STEP_FIELDS = {
    "name",
    "duration_seconds",
    "heat_intensity",
    "scent_dosage_ml",
    "ingredient_id",
    "music_track_id",
    "lighting_scene",
}

# session field aliases -> InfusionStep attribute
SESSION_STEP_FIELDS: Dict[str, str] = {
    "name": "name",
    "duration": "duration_seconds",
    "heat": "heat_intensity",
    "dosage": "scent_dosage_ml",
    "ingredient": "ingredient_id",
    "track": "music_track_id",
    "scene": "lighting_scene",
}

INT_STEP_FIELDS = {"duration_seconds", "heat_intensity", "scent_dosage_ml", "ingredient_id"}

EMPTY_STEPS_MESSAGE = 'No steps added yet. Use "add" to create your first infusion round.'
SAVE_FAILED_MESSAGE = "Error saving recipe. Please try again."
