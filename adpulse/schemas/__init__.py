# Schemas - API request/response models
