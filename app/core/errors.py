"""
Exceptions métier.

Les services lèvent ces erreurs, les routers les traduisent en HTTPException.
"""


class ValidationFailed(ValueError):
    """Entrée refusée avant tout appel à un collaborateur externe"""


class BlockFieldError(ValidationFailed):
    """Champ (payload ou style) qui n'appartient pas au type du bloc"""


class UploadRejected(ValidationFailed):
    """Fichier trop gros ou du mauvais type"""


class SlugTaken(ValidationFailed):
    """Slug déjà utilisé par un autre produit"""


class DocumentNotFound(LookupError):
    def __init__(self, path: str):
        super().__init__(f"Document not found: {path}")
        self.path = path


class CollaboratorError(RuntimeError):
    """Echec d'un service externe (stockage, Stripe, LLM)"""


class ProductUnavailable(LookupError):
    """Produit existant mais non publié : pas de page publique"""
