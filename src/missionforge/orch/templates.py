from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Tuple

from missionforge.extractors.domain_rules import DEFAULT_DOMAIN, get_profile
from missionforge.schemas.work_order import ExtractedRequirements, format_amount


@dataclass(frozen=True)
class DomainTemplate:
    responsibilities: Tuple[str, ...]
    project_types: Tuple[str, ...]
    closing: str


TEMPLATES: Dict[str, DomainTemplate] = {
    "Backend": DomainTemplate(
        responsibilities=(
            "Conception et développement d'APIs RESTful/GraphQL",
            "Optimisation des performances et de la scalabilité",
            "Intégration avec bases de données et services externes",
            "Mise en place de tests unitaires et d'intégration",
            "Sécurisation des endpoints et gestion des authentifications",
            "Documentation technique des APIs",
        ),
        project_types=(
            "Développement d'une API e-commerce avec gestion des commandes et paiements",
            "Mise en place d'une architecture microservices pour une fintech",
        ),
        closing="Rejoignez notre équipe pour construire des APIs robustes et scalables !",
    ),
    "Frontend": DomainTemplate(
        responsibilities=(
            "Développement d'interfaces utilisateur responsive",
            "Intégration avec APIs REST et GraphQL",
            "Optimisation des performances et de l'accessibilité",
            "Mise en place de tests unitaires et e2e",
            "Collaboration étroite avec les équipes UX/UI",
            "Maintenance et évolution du code existant",
        ),
        project_types=(
            "Refonte complète d'une plateforme e-commerce",
            "Développement d'un dashboard admin avec visualisations avancées",
        ),
        closing="Participez à la création d'expériences utilisateur exceptionnelles !",
    ),
    "Fullstack": DomainTemplate(
        responsibilities=(
            "Développement frontend et backend de l'application",
            "Conception de l'architecture technique globale",
            "Intégration complète des fonctionnalités",
            "Optimisation des performances full-stack",
            "Déploiement et maintenance de l'application",
            "Collaboration avec les équipes produit et design",
        ),
        project_types=(
            "Développement complet d'une marketplace B2B",
            "Création d'une plateforme SaaS de gestion de projets",
        ),
        closing="Contribuez à l'ensemble de notre stack technologique !",
    ),
    "Mobile": DomainTemplate(
        responsibilities=(
            "Développement d'applications iOS et Android",
            "Intégration avec APIs et services backend",
            "Optimisation des performances mobiles",
            "Gestion des notifications push",
            "Publication sur App Store et Google Play",
            "Tests sur différents devices et OS",
        ),
        project_types=(
            "Application e-commerce mobile avec paiement intégré",
            "App de livraison avec géolocalisation temps réel",
        ),
        closing="Développez la prochaine app qui révolutionnera le mobile !",
    ),
    "DevOps": DomainTemplate(
        responsibilities=(
            "Mise en place de pipelines CI/CD",
            "Gestion de l'infrastructure cloud (AWS/Azure)",
            "Containerisation avec Docker et Kubernetes",
            "Monitoring et alerting des services",
            "Automatisation des déploiements",
            "Sécurisation de l'infrastructure",
        ),
        project_types=(
            "Migration d'infrastructure vers le cloud",
            "Automatisation complète des déploiements",
        ),
        closing="Optimisez notre infrastructure pour une performance maximale !",
    ),
    "Data": DomainTemplate(
        responsibilities=(
            "Conception et maintenance des pipelines de données",
            "Modélisation et nettoyage des données",
            "Mise en place de contrôles de qualité",
            "Restitution via tableaux de bord et rapports",
            "Industrialisation des modèles analytiques",
            "Documentation des flux et du catalogue de données",
        ),
        project_types=(
            "Mise en place d'une plateforme data pour le pilotage commercial",
            "Industrialisation de modèles de prévision de la demande",
        ),
        closing="Donnez de la valeur à nos données !",
    ),
}

# band -> (profile sentence, responsibility count, extra responsibilities)
EXPERIENCE_ADAPTATIONS: Dict[str, Tuple[str, int, Tuple[str, ...]]] = {
    "0-3": ("Profil junior avec bases solides et envie d'apprendre", 4, ()),
    "3-7": ("Solide expérience sur des projets similaires et autonomie technique", 5, ()),
    "7-12": (
        "Profil senior avec capacité de mentoring et d'architecture",
        5,
        ("Mentoring des développeurs junior", "Définition de l'architecture technique"),
    ),
    "12+": (
        "Expert technique avec vision stratégique",
        5,
        ("Leadership technique de l'équipe", "Définition des standards et bonnes pratiques"),
    ),
}

GENERIC_TECHNOLOGIES = ("Git", "Docker", "Agile/Scrum", "Linux", "REST API")

UNIT_LABELS = {"DAY": "jours", "WEEK": "semaines", "MONTH": "mois", "YEAR": "ans"}
WORK_MODE_LABELS = {"REMOTE": "Télétravail", "ONSITE": "Sur site", "HYBRID": "Hybride"}


def get_template(domain: str) -> DomainTemplate:
    return TEMPLATES.get(get_profile(domain).name, TEMPLATES[DEFAULT_DOMAIN])


def responsibilities_for(domain: str, band: str) -> List[str]:
    _, count, extra = EXPERIENCE_ADAPTATIONS.get(band, EXPERIENCE_ADAPTATIONS["3-7"])
    return list(get_template(domain).responsibilities[:count]) + list(extra)


def fallback_title(req: ExtractedRequirements) -> str:
    lead = req.expertises[0] if req.expertises else get_profile(req.domain).default_technologies[0]
    return f"{req.position} {lead} - {req.city}"


def fallback_description(req: ExtractedRequirements, stack: List[str]) -> str:
    template = get_template(req.domain)
    profile_line, _, _ = EXPERIENCE_ADAPTATIONS.get(req.experience_band, EXPERIENCE_ADAPTATIONS["3-7"])
    # first project type keeps the text deterministic
    project = template.project_types[0]
    rate = format_amount(req.daily_rate)

    lines = [
        "CONTEXTE DU PROJET :",
        project + ".",
        "",
        "VOS MISSIONS :",
    ]
    lines += [f"• {r}" for r in responsibilities_for(req.domain, req.experience_band)]
    lines += [
        "",
        "PROFIL RECHERCHÉ :",
        f"{req.position}, {profile_line.lower()}.",
        "",
        "STACK TECHNIQUE :",
        ", ".join(stack[:5]),
        "",
        "MODALITÉS :",
        f"• Localisation : {req.city}, {req.country}",
        f"• Mode : {WORK_MODE_LABELS.get(req.work_mode, req.work_mode)}",
        f"• Durée : {req.duration} {UNIT_LABELS.get(req.duration_unit, req.duration_unit.lower())}",
        f"• Expérience requise : {req.experience_band} ans",
        f"• Type de contrat : {req.contract_type}",
        f"• Taux journalier : {rate} {req.currency}",
        "",
        template.closing,
    ]
    return "\n".join(lines)
