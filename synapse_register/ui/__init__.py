from synapse_register.ui.form import CheckboxInput, FormState, Outcome, OutputRegion, RegistrationForm, TextInput

__all__ = ["CheckboxInput", "FormState", "Outcome", "OutputRegion", "RegistrationForm", "TextInput"]
