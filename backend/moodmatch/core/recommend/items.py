"""
Tipos de las recomendaciones de contenido.

Una recomendación (película, canción o libro) se representa con el mismo
RecommendationItem sea cual sea su origen (OMDB, Spotify, Google Books o
las listas de respaldo), de modo que la capa de presentación no distingue
entre contenido real y de respaldo.
"""

from dataclasses import asdict, dataclass, field, replace
from typing import Any, Dict, List, Mapping, Optional

CONTENT_KINDS = ("movies", "songs", "books")

# Número de elementos que se muestran por tipo de contenido
DISPLAY_LIMIT = 3

NO_DESCRIPTION = "No description available"

# Imagen de relleno por tipo de contenido (ancho x alto de la tarjeta)
PLACEHOLDER_IMAGES = {
    "movies": "/placeholder.svg?height=200&width=150&text=Movie",
    "songs": "/placeholder.svg?height=200&width=200&text=Song",
    "books": "/placeholder.svg?height=200&width=150&text=Book",
}


def placeholder_image(kind: str) -> str:
    return PLACEHOLDER_IMAGES.get(kind, PLACEHOLDER_IMAGES["movies"])


@dataclass
class RecommendationItem:
    """
    Elemento recomendado.

    Attributes:
        id (str): Identificador en la fuente (imdbID, id de Spotify...)
        title (str): Título visible (obligatorio)
        description (str): Descripción corta
        image (str): URL de la imagen o placeholder
        link (str): Enlace al contenido (obligatorio)
        rating (float): Valoración, None si la fuente no la ofrece
        preview_url (str): Audio de muestra (solo canciones)
    """

    id: str
    title: str
    description: str
    image: str
    link: str
    rating: Optional[float] = None
    preview_url: Optional[str] = None
    kind: str = field(default="movies", repr=False, compare=False)

    def __post_init__(self):
        if not self.title or not str(self.title).strip():
            raise ValueError("Una recomendación necesita título")
        if not self.link or not str(self.link).strip():
            raise ValueError(f"La recomendación '{self.title}' necesita enlace")

        self.id = str(self.id) if self.id else self.title
        if not self.description:
            self.description = NO_DESCRIPTION
        if not self.image:
            self.image = placeholder_image(self.kind)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], kind: str) -> "RecommendationItem":
        """Construye un elemento a partir de un registro de las listas JSON."""
        return cls(
            id=data.get("id", ""),
            title=data.get("title", ""),
            description=data.get("description", ""),
            image=data.get("image", ""),
            link=data.get("link", ""),
            rating=data.get("rating"),
            preview_url=data.get("preview_url"),
            kind=kind,
        )

    def copy(self) -> "RecommendationItem":
        return replace(self)

    def to_dict(self) -> Dict[str, Any]:
        """Formato JSON de la API (sin campos None ni el tipo interno)."""
        data = asdict(self)
        data.pop("kind")
        return {key: value for key, value in data.items() if value is not None}


@dataclass
class RecommendationSet:
    """Recomendaciones de los tres tipos para una emoción."""

    movies: List[RecommendationItem] = field(default_factory=list)
    songs: List[RecommendationItem] = field(default_factory=list)
    books: List[RecommendationItem] = field(default_factory=list)

    def get(self, kind: str) -> List[RecommendationItem]:
        if kind not in CONTENT_KINDS:
            raise KeyError(kind)
        return getattr(self, kind)

    def to_dict(self) -> Dict[str, List[Dict[str, Any]]]:
        return {kind: [item.to_dict() for item in self.get(kind)] for kind in CONTENT_KINDS}
