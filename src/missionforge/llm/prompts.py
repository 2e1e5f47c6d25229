from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from missionforge.schemas.work_order import ExtractedRequirements, format_amount


@dataclass(frozen=True)
class StyleVariation:
    style: str
    tone: str
    focus: str


DEFAULT_STYLE = StyleVariation("Professionnel", "Engageant", "Technique")

STYLE_VARIATIONS: Dict[str, Tuple[StyleVariation, ...]] = {
    "backend": (
        StyleVariation("Technique et précis", "Professionnel", "Architecture et performance"),
        StyleVariation("Orienté projet", "Dynamique", "Développement et intégration"),
        StyleVariation("Axé sécurité", "Rigoureux", "Sécurité et fiabilité"),
    ),
    "frontend": (
        StyleVariation("UX/UI orienté", "Créatif", "Expérience utilisateur"),
        StyleVariation("Performance focus", "Technique", "Optimisation et performance"),
        StyleVariation("Framework spécialisé", "Expert", "Maîtrise des frameworks"),
    ),
    "fullstack": (
        StyleVariation("Vision produit", "Polyvalent", "Livraison de bout en bout"),
        StyleVariation("Orienté projet", "Dynamique", "Intégration front et back"),
    ),
    "mobile": (
        StyleVariation("Cross-platform", "Innovant", "Développement multi-plateforme"),
        StyleVariation("Performance mobile", "Technique", "Optimisation mobile"),
    ),
    "devops": (
        StyleVariation("Infrastructure as Code", "Systémique", "Automatisation"),
        StyleVariation("Monitoring et observabilité", "Analytique", "Surveillance et performance"),
    ),
    "data": (
        StyleVariation("Pipeline de données", "Méthodique", "Qualité et fiabilité des données"),
        StyleVariation("Analytique", "Pédagogue", "Valeur métier des données"),
    ),
}

DOMAIN_INSTRUCTIONS: Dict[str, List[str]] = {
    "backend": [
        "Focus sur les APIs, bases de données, et architecture serveur",
        "Mentionner la scalabilité et les performances",
        "Inclure sécurité et authentification",
        "Éviter les technologies frontend (React, Vue, Angular)",
    ],
    "frontend": [
        "Focus sur l'interface utilisateur et l'expérience",
        "Mentionner responsive design et accessibilité",
        "Inclure les frameworks JS modernes",
        "Éviter les technologies backend pures",
    ],
    "fullstack": [
        "Couvrir à la fois l'interface et les APIs",
        "Mentionner l'intégration entre front et back",
        "Inclure déploiement et tests de bout en bout",
    ],
    "mobile": [
        "Focus sur iOS/Android et cross-platform",
        "Mentionner App Store et Google Play",
        "Inclure notifications push et offline",
        "Technologies : React Native, Flutter, native",
    ],
    "devops": [
        "Focus sur infrastructure et automatisation",
        "Mentionner cloud, containers, et CI/CD",
        "Inclure monitoring et sécurité",
        "Technologies : Docker, Kubernetes, AWS, Jenkins",
    ],
    "data": [
        "Focus sur les pipelines, la qualité et la gouvernance des données",
        "Mentionner la volumétrie et les outils d'orchestration",
        "Inclure la restitution (tableaux de bord, modèles)",
    ],
}
GENERIC_INSTRUCTIONS = ["Instructions générales de développement"]

ALLOWED_TECHNOLOGIES: Dict[str, List[str]] = {
    "backend": [
        "Node.js", "Express.js", "PHP", "Laravel", "Python", "Django", "Java", "Spring",
        "C#", ".NET", "PostgreSQL", "MongoDB", "Redis", "Docker", "JWT", "REST API", "GraphQL",
    ],
    "frontend": [
        "React", "Vue.js", "Angular", "TypeScript", "JavaScript", "HTML5", "CSS3", "Sass",
        "Redux", "Vuex", "Webpack", "Jest", "Cypress", "Figma", "Responsive Design",
    ],
    "fullstack": [
        "React", "Vue.js", "Angular", "TypeScript", "Node.js", "Express.js", "NestJS",
        "PostgreSQL", "MongoDB", "Docker", "REST API", "GraphQL", "Jest", "Git",
    ],
    "mobile": [
        "React Native", "Flutter", "Swift", "Kotlin", "Dart", "Firebase", "Expo", "Redux",
        "AsyncStorage", "Push Notifications", "App Store", "Google Play", "Fastlane",
    ],
    "devops": [
        "Docker", "Kubernetes", "AWS", "Azure", "Jenkins", "GitLab CI", "Terraform", "Ansible",
        "Prometheus", "Grafana", "ELK Stack", "Nginx", "Linux", "Bash", "CI/CD",
    ],
    "data": [
        "Python", "SQL", "Pandas", "Spark", "Airflow", "Kafka", "PostgreSQL", "Power BI",
        "Scikit-learn", "TensorFlow", "Docker",
    ],
}

JSON_FIELDS = (
    "title", "description", "country", "city", "workMode", "duration", "durationType",
    "startImmediately", "experienceYear", "contractType", "estimatedDailyRate", "currency",
    "domain", "position", "requiredExpertises",
)


def pick_style(domain: str, rng: Optional[random.Random] = None) -> StyleVariation:
    variations = STYLE_VARIATIONS.get(domain.lower())
    if not variations:
        return DEFAULT_STYLE
    rng = rng or random.Random()
    return rng.choice(variations)


def _json_schema(domain: str, req: ExtractedRequirements) -> str:
    # literal values are quoted like JSON so the model copies them as is
    rate = format_amount(req.daily_rate)
    return "\n".join([
        "{",
        f'  "title": "Titre spécialisé {domain}",',
        f'  "description": "Description détaillée avec contexte {domain}",',
        f'  "country": "{req.country}",',
        f'  "city": "{req.city}",',
        f'  "workMode": "{req.work_mode}",',
        f'  "duration": {req.duration},',
        f'  "durationType": "{req.duration_unit}",',
        '  "startImmediately": true,',
        f'  "experienceYear": "{req.experience_band}",',
        f'  "contractType": "{req.contract_type}",',
        f'  "estimatedDailyRate": {rate},',
        f'  "currency": "{req.currency}",',
        f'  "domain": "{req.domain}",',
        f'  "position": "{req.position}",',
        '  "requiredExpertises": ["tech1", "tech2", "tech3", "tech4"]',
        "}",
    ])


def build_prompt(
    domain: str,
    requirements: ExtractedRequirements,
    original_text: str,
    rng: Optional[random.Random] = None,
) -> str:
    """
    Generation prompt for one request.
    Only the style line depends on rng; the same rng state gives the same prompt.
    """
    key = domain.lower()
    req = requirements
    style = pick_style(domain, rng)
    instructions = DOMAIN_INSTRUCTIONS.get(key, GENERIC_INSTRUCTIONS)
    allowed = ", ".join(ALLOWED_TECHNOLOGIES.get(key, []))
    rate = format_amount(req.daily_rate)

    lines = [
        f"Tu es un expert en recrutement IT spécialisé en {domain}.",
        "",
        "ANALYSE DE L'INPUT UTILISATEUR :",
        f'"{original_text.strip()}"',
        "",
        "CONTRAINTES ABSOLUES À RESPECTER :",
        f"- Ville : {req.city} (NE PAS CHANGER)",
        f"- Budget : {rate} {req.currency} par jour (EXACT)",
        f"- Durée : {req.duration} {req.duration_unit}",
        f"- Mode : {req.work_mode}",
        f"- Contrat : {req.contract_type}",
        f"- Expérience : {req.experience_band} ans",
        f"- Domaine : {domain} (RESPECTER LE DOMAINE)",
    ]
    if req.title:
        lines.append(f"- Titre imposé : {req.title}")
    if req.expertises:
        lines.append(f"- Technologies demandées : {', '.join(req.expertises)}")

    lines += ["", f"SPÉCIFICITÉS {domain.upper()} :"]
    lines += [f"- {s}" for s in instructions]
    lines += [
        "",
        f"STYLE DE GÉNÉRATION : Style: {style.style}, Ton: {style.tone}, Focus: {style.focus}",
        "",
        "INSTRUCTIONS PRÉCISES :",
        f"1. Titre : Créer un titre spécifique au domaine {domain}",
        f"2. Description : au moins 120 caractères, contexte {domain}, missions et profil",
        f"3. Technologies : UNIQUEMENT celles pertinentes pour {domain}",
        f"4. Budget : UTILISER EXACTEMENT {rate} {req.currency}",
        f"5. Localisation : GARDER {req.city}",
        "",
        f"TECHNOLOGIES AUTORISÉES POUR {domain.upper()} :",
        allowed or "Technologies pertinentes pour le besoin",
        "",
        "Réponds UNIQUEMENT avec un objet JSON, sans texte autour, avec cette structure EXACTE :",
        _json_schema(domain, req),
    ]
    return "\n".join(lines)
