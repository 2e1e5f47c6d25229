from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from missionforge.extractors.patterns import contains_phrase, first_group_match, phrase_pattern


@dataclass(frozen=True)
class DomainProfile:
    name: str
    position: str
    keywords: Tuple[str, ...]
    # keywords that name the domain itself ("backend", "front-end"...)
    direct_keywords: Tuple[str, ...]
    default_technologies: Tuple[str, ...]
    complementary_technologies: Tuple[str, ...]
    reference_rate: float  # DH per day, used when the request names no amount


DOMAINS: Dict[str, DomainProfile] = {
    "Fullstack": DomainProfile(
        name="Fullstack",
        position="Développeur Fullstack",
        keywords=("fullstack", "full-stack", "full stack", "polyvalent"),
        direct_keywords=("fullstack", "full-stack", "full stack"),
        default_technologies=("React", "Node.js", "MongoDB", "Express.js", "TypeScript"),
        complementary_technologies=("Redux", "JWT", "Docker", "AWS", "Git", "Jest", "Cypress"),
        reference_rate=4200,
    ),
    "Backend": DomainProfile(
        name="Backend",
        position="Développeur Backend",
        keywords=(
            "backend", "back-end", "back end", "api", "serveur", "server", "base de données",
            "database", "node.js", "nodejs", "php", "laravel", "symfony", "python", "django",
            "java", "spring", ".net", "c#", "postgresql", "mongodb", "mysql", "microservices",
        ),
        direct_keywords=("backend", "back-end", "back end"),
        default_technologies=("Node.js", "Express.js", "MongoDB", "PostgreSQL", "REST API"),
        complementary_technologies=("Docker", "JWT", "Swagger", "Jest", "Postman", "AWS", "Nginx"),
        reference_rate=4000,
    ),
    "Frontend": DomainProfile(
        name="Frontend",
        position="Développeur Frontend",
        keywords=(
            "frontend", "front-end", "front end", "interface", "ui", "ux", "react", "vue",
            "angular", "javascript", "typescript", "html", "css", "sass", "responsive",
            "design", "web design", "intégrateur",
        ),
        direct_keywords=("frontend", "front-end", "front end"),
        default_technologies=("React", "JavaScript", "HTML5", "CSS3", "TypeScript"),
        complementary_technologies=("Redux", "React Router", "Styled Components", "Jest", "Cypress", "Webpack", "Sass"),
        reference_rate=3500,
    ),
    "Mobile": DomainProfile(
        name="Mobile",
        position="Développeur Mobile",
        keywords=(
            "mobile", "application mobile", "app mobile", "ios", "android", "react native",
            "flutter", "swift", "kotlin", "xamarin",
        ),
        direct_keywords=("mobile",),
        default_technologies=("React Native", "Flutter", "Firebase", "Redux"),
        complementary_technologies=("Expo", "CodePush", "Fastlane", "Detox", "Crashlytics", "AsyncStorage"),
        reference_rate=4500,
    ),
    "DevOps": DomainProfile(
        name="DevOps",
        position="Ingénieur DevOps",
        keywords=(
            "devops", "dev ops", "infrastructure", "cloud", "aws", "azure", "docker",
            "kubernetes", "k8s", "jenkins", "ci/cd", "deployment", "déploiement", "terraform",
            "ansible", "sre",
        ),
        direct_keywords=("devops", "dev ops"),
        default_technologies=("Docker", "Kubernetes", "AWS", "Jenkins", "CI/CD"),
        complementary_technologies=("Terraform", "Ansible", "Prometheus", "Grafana", "GitLab CI", "Helm"),
        reference_rate=5000,
    ),
    "Data": DomainProfile(
        name="Data",
        position="Ingénieur Data",
        keywords=(
            "data", "data science", "data scientist", "data engineer", "data analyst",
            "machine learning", "big data", "pandas", "spark", "pyspark", "power bi", "etl",
            "airflow", "analytics",
        ),
        direct_keywords=("data",),
        default_technologies=("Python", "SQL", "Pandas", "Spark", "Airflow"),
        complementary_technologies=("Scikit-learn", "Power BI", "Docker", "Git", "PostgreSQL"),
        reference_rate=4500,
    ),
}

# tie-break order; DOMAINS is declared in the same order
DOMAIN_PRIORITY: Tuple[str, ...] = tuple(DOMAINS)
DEFAULT_DOMAIN = "Backend"

# used only when no domain keyword scores
FALLBACK_RULES: List[Tuple[str, Tuple[str, ...]]] = [
    ("Frontend", ("web", "site", "site web", "interface", "landing page", "vitrine")),
    ("Backend", ("serveur", "server", "données", "donnees")),
]

# work-mode phrases that would otherwise trip the "site" fallback
NON_DOMAIN_PHRASES = ("sur site", "on site", "on-site")

# role phrases that name the position directly: (phrases, position, domain or None)
ROLE_TITLES: List[Tuple[Tuple[str, ...], str, Optional[str]]] = [
    (("data scientist",), "Data Scientist", "Data"),
    (("data engineer", "ingénieur data", "ingenieur data"), "Data Engineer", "Data"),
    (("data analyst",), "Data Analyst", "Data"),
    (("designer ui/ux", "ui/ux designer", "ux designer", "ui designer", "designer ux"), "Designer UI/UX", "Frontend"),
    (("product owner",), "Product Owner", None),
    (("scrum master",), "Scrum Master", None),
    (("chef de projet", "project manager"), "Chef de projet", None),
    (("tech lead", "lead dev", "lead developer"), "Tech Lead", None),
    (("architecte logiciel", "software architect", "architecte solution"), "Architecte logiciel", None),
    (("ingénieur qa", "ingenieur qa", "qa engineer", "testeur"), "Ingénieur QA", None),
]


def keyword_weight(keyword: str) -> int:
    # longer keywords are more specific
    return 3 if len(keyword) > 5 else 1


@dataclass(frozen=True)
class DomainMatch:
    domain: str
    position: str
    default_technologies: Tuple[str, ...]
    explicit: bool
    scores: Dict[str, int] = field(default_factory=dict)

    @property
    def profile(self) -> DomainProfile:
        return DOMAINS[self.domain]


def score_domains(text: str) -> Dict[str, int]:
    return {
        name: sum(keyword_weight(k) for k in profile.keywords if contains_phrase(text, k))
        for name, profile in DOMAINS.items()
    }


def classify(text: str) -> DomainMatch:
    """
    Pick the technical domain of a request.
    Highest keyword score wins; ties go to the earlier domain in DOMAIN_PRIORITY.
    With no score at all, FALLBACK_RULES apply, then DEFAULT_DOMAIN.
    """
    scores = score_domains(text)
    best = max(DOMAIN_PRIORITY, key=lambda name: (scores[name], -DOMAIN_PRIORITY.index(name)))

    if scores[best] <= 0:
        rest = text
        for phrase in NON_DOMAIN_PHRASES:
            rest = phrase_pattern(phrase).sub(" ", rest)
        best = first_group_match(rest, FALLBACK_RULES) or DEFAULT_DOMAIN

    profile = DOMAINS[best]
    explicit = any(contains_phrase(text, k) for k in profile.direct_keywords)
    return DomainMatch(
        domain=profile.name,
        position=profile.position,
        default_technologies=profile.default_technologies,
        explicit=explicit,
        scores=scores,
    )


def detect_role(text: str) -> Optional[Tuple[str, Optional[str]]]:
    """(position, domain or None) when the text names a role directly."""
    for phrases, position, domain in ROLE_TITLES:
        if any(contains_phrase(text, p) for p in phrases):
            return position, domain
    return None


def get_profile(domain: str) -> DomainProfile:
    for name, profile in DOMAINS.items():
        if name.lower() == (domain or "").strip().lower():
            return profile
    return DOMAINS[DEFAULT_DOMAIN]
