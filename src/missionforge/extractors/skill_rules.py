from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Tuple

from missionforge.extractors.patterns import phrase_pattern

# canonical name -> aliases (lowercase, matched as whole phrases)
TECH_MAP: Dict[str, List[str]] = {
    "React Native": ["react native", "react-native"],
    "React": ["react", "react.js", "reactjs"],
    "Next.js": ["next.js", "nextjs"],
    "Vue.js": ["vue", "vue.js", "vuejs"],
    "Nuxt.js": ["nuxt", "nuxt.js"],
    "Angular": ["angular", "angularjs"],
    "JavaScript": ["javascript"],
    "TypeScript": ["typescript"],
    "HTML5": ["html", "html5"],
    "CSS3": ["css", "css3"],
    "Sass": ["sass", "scss"],
    "Tailwind CSS": ["tailwind", "tailwindcss"],
    "Bootstrap": ["bootstrap"],
    "Redux": ["redux"],
    "Webpack": ["webpack"],
    "Node.js": ["node.js", "nodejs", "node"],
    "Express.js": ["express.js", "expressjs"],
    "NestJS": ["nestjs", "nest.js"],
    "PHP": ["php"],
    "Laravel": ["laravel"],
    "Symfony": ["symfony"],
    "Python": ["python"],
    "Django": ["django"],
    "Flask": ["flask"],
    "FastAPI": ["fastapi"],
    "Java": ["java"],
    "Spring Boot": ["spring boot", "springboot"],
    "Spring": ["spring"],
    "C#": ["c#"],
    ".NET": [".net", "dotnet", "asp.net", ".net core"],
    "Go": ["golang"],
    "Ruby on Rails": ["ruby on rails", "rails"],
    "PostgreSQL": ["postgresql", "postgres"],
    "MySQL": ["mysql"],
    "MongoDB": ["mongodb", "mongo"],
    "Redis": ["redis"],
    "Elasticsearch": ["elasticsearch"],
    "GraphQL": ["graphql"],
    "REST API": ["rest api", "api rest", "restful"],
    "Kafka": ["kafka"],
    "Flutter": ["flutter"],
    "Dart": ["dart"],
    "Swift": ["swift"],
    "Kotlin": ["kotlin"],
    "Firebase": ["firebase"],
    "Expo": ["expo"],
    "iOS": ["ios"],
    "Android": ["android"],
    "Docker": ["docker"],
    "Kubernetes": ["kubernetes", "k8s"],
    "AWS": ["aws", "amazon web services"],
    "Azure": ["azure"],
    "GCP": ["gcp", "google cloud"],
    "Jenkins": ["jenkins"],
    "GitLab CI": ["gitlab ci", "gitlab-ci"],
    "Terraform": ["terraform"],
    "Ansible": ["ansible"],
    "CI/CD": ["ci/cd", "cicd"],
    "Prometheus": ["prometheus"],
    "Grafana": ["grafana"],
    "Linux": ["linux"],
    "SQL": ["sql"],
    "Pandas": ["pandas"],
    "Spark": ["spark", "pyspark"],
    "Airflow": ["airflow"],
    "TensorFlow": ["tensorflow"],
    "PyTorch": ["pytorch"],
    "Scikit-learn": ["scikit-learn", "sklearn"],
    "Machine Learning": ["machine learning"],
    "Power BI": ["power bi", "powerbi"],
    "Figma": ["figma"],
}

_ALIAS_TO_CANONICAL: Dict[str, str] = {
    alias: canonical for canonical, aliases in TECH_MAP.items() for alias in aliases
}
_ALIAS_TO_CANONICAL.update({canonical.lower(): canonical for canonical in TECH_MAP})

# longest alias first so "react native" is consumed before "react"
_ALIASES_BY_LENGTH: List[Tuple[str, str]] = sorted(
    ((alias, canonical) for canonical, aliases in TECH_MAP.items() for alias in aliases),
    key=lambda kv: len(kv[0]),
    reverse=True,
)


def canonical_tech(name: str) -> str:
    """Canonical casing for a known technology, otherwise the trimmed input."""
    s = " ".join(name.split())
    return _ALIAS_TO_CANONICAL.get(s.lower(), s)


def extract_expertises(text: str) -> List[str]:
    """
    Technologies named in text, canonical casing, in order of first appearance.
    Matched spans are masked so a longer alias hides the shorter ones inside it.
    """
    masked = text
    hits: List[Tuple[int, str]] = []
    for alias, canonical in _ALIASES_BY_LENGTH:
        for m in phrase_pattern(alias).finditer(masked):
            hits.append((m.start(), canonical))
        masked = phrase_pattern(alias).sub(lambda m: " " * len(m.group(0)), masked)

    hits.sort(key=lambda h: h[0])
    return merge_unique([], (c for _, c in hits))


def merge_unique(base: Iterable[str], extra: Iterable[str], limit: Optional[int] = None) -> List[str]:
    """
    Append extra to base, skipping blanks and case-insensitive duplicates,
    stopping once limit items are held (existing items beyond limit are kept).
    """
    out: List[str] = []
    seen = set()
    for s in base:
        s = " ".join(str(s).split())
        if s and s.lower() not in seen:
            seen.add(s.lower())
            out.append(s)
    for s in extra:
        if limit is not None and len(out) >= limit:
            break
        s = " ".join(str(s).split())
        if s and s.lower() not in seen:
            seen.add(s.lower())
            out.append(s)
    return out
