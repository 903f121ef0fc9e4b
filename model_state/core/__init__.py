"""model_state core: models, preference operations, paths and settings"""
