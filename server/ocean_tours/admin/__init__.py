"""Client-side admin tooling bound to the tours API."""

from .form_controller import AdminFormController, FormState, SubmitResult, TourFormSchema

__all__ = [
    "AdminFormController",
    "FormState",
    "SubmitResult",
    "TourFormSchema",
]
