"""model_state storage: JSON codec and atomic file persistence"""
