"""Discord embed builders for user lifecycle notifications."""

from __future__ import annotations

from datetime import datetime, timezone

COLOR_INFO = 3447003
COLOR_DANGER = 13632027
FOOTER = "Obsidian Intranet - Gestion des utilisateurs"


def _field(name: str, value: str, inline: bool = True) -> dict:
    return {"name": name, "value": value, "inline": inline}


def _embed(title: str, description: str, color: int, fields: list[dict]) -> dict:
    return {
        "title": title,
        "description": description,
        "color": color,
        "fields": fields,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "footer": {"text": FOOTER},
    }


def user_created_embed(payload: dict) -> dict:
    return _embed(
        "Nouvel utilisateur créé",
        "Un nouvel utilisateur a été créé dans l'intranet",
        COLOR_INFO,
        [
            _field("Utilisateur", f"`{payload.get('username')}`"),
            _field("Rôle", f"`{payload.get('role')}`"),
            _field("Département", f"`{payload.get('department')}`", inline=False),
            _field(
                "Mot de passe temporaire",
                f"```{payload.get('temporary_password')}```",
                inline=False,
            ),
            _field(
                "Important",
                "Envoyer le mot de passe à la personne concernée et demander "
                "de le changer à la première connexion",
                inline=False,
            ),
        ],
    )


def user_deleted_embed(payload: dict) -> dict:
    return _embed(
        "Utilisateur supprimé",
        "Le profil utilisateur a été supprimé du système",
        COLOR_DANGER,
        [
            _field("Identifiant supprimé", f"`{payload.get('username')}`"),
            _field("Ancien rôle", f"`{payload.get('role')}`"),
            _field("Département", f"`{payload.get('department')}`"),
            _field("Supprimé par", f"`{payload.get('actor_username')}`"),
        ],
    )


def password_reset_embed(payload: dict) -> dict:
    username = payload.get("username")
    return _embed(
        "Réinitialisation de mot de passe",
        "Un administrateur a réinitialisé le mot de passe de l'utilisateur "
        f"**{username}**",
        COLOR_INFO,
        [
            _field("Identifiant", f"`{username}`"),
            _field(
                "Mot de passe temporaire",
                f"```{payload.get('temporary_password')}```",
            ),
        ],
    )


EMBED_BUILDERS = {
    "user.created": user_created_embed,
    "user.deleted": user_deleted_embed,
    "user.password_reset": password_reset_embed,
}


def build_embed(event_type: str, payload: dict) -> dict | None:
    builder = EMBED_BUILDERS.get(event_type)
    if builder is None:
        return None
    return builder(payload)
