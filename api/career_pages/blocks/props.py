from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

ButtonVariant = Literal["default", "secondary", "outline", "ghost", "link", "destructive"]
BadgeVariant = Literal["default", "secondary", "outline", "destructive"]


class BlockProps(BaseModel):
    # Keys outside a block's schema are dropped rather than rejected.
    model_config = ConfigDict(extra="ignore")


class HeroProps(BlockProps):
    title: str | None = None
    subtitle: str | None = None
    backgroundImageUrl: str | None = None
    primaryCtaLabel: str | None = None
    primaryCtaHref: str | None = None
    secondaryCtaLabel: str | None = None
    secondaryCtaHref: str | None = None
    alignment: Literal["left", "center", "right"] | None = None
    size: Literal["compact", "tall"] | None = None
    backgroundStyle: Literal["solid", "image", "gradient"] | None = None
    primaryCtaVariant: ButtonVariant | None = None
    primaryCtaSize: Literal["sm", "default", "lg"] | None = None
    textColor: Literal["white", "dark"] | None = None
    logoUrl: str | None = None
    logoAlt: str | None = None
    cultureVideoUrl: str | None = None


class BenefitItem(BlockProps):
    title: str | None = None
    description: str | None = None
    icon: str | None = None
    iconColor: str | None = None


class BenefitsProps(BlockProps):
    heading: str | None = None
    benefits: list[BenefitItem] | None = None
    styleVariant: Literal["cards", "panels", "list"] | None = None


class SkillItem(BlockProps):
    skill: str | None = None


class TeamMember(BlockProps):
    name: str | None = None
    role: str | None = None
    image: str | None = None
    bio: str | None = None
    skills: list[SkillItem] | None = None

    @field_validator("skills", mode="before")
    @classmethod
    def wrap_plain_skills(cls, value: Any) -> Any:
        if not isinstance(value, list):
            return value
        return [{"skill": item} if isinstance(item, str) else item for item in value]


class TeamProps(BlockProps):
    heading: str | None = None
    description: str | None = None
    members: list[TeamMember] | None = None
    background: Literal["plain", "accentStrip"] | None = None
    align: Literal["left", "center"] | None = None


class JobsProps(BlockProps):
    heading: str | None = None
    layout: Literal["list", "cards", "team", "location"] | None = None
    density: Literal["comfortable", "compact"] | None = None
    background: Literal["plain", "card"] | None = None
    emptyStateMessage: str | None = None
    buttonVariant: ButtonVariant | None = None
    badgeVariant: BadgeVariant | None = None


class VideoProps(BlockProps):
    title: str | None = None
    videoUrl: str | None = None
    description: str | None = None
    align: Literal["left", "center"] | None = None
    autoplay: bool | None = None
    controls: bool | None = None
    loop: bool | None = None


class FooterProps(BlockProps):
    text: str | None = None
    showPoweredBy: bool | None = None


HERO_DEFAULTS = {
    "title": "Join our team",
    "subtitle": "Help us build the future of work.",
    "backgroundImageUrl": "",
    "primaryCtaLabel": "View open roles",
    "primaryCtaHref": "#jobs",
    "secondaryCtaLabel": "",
    "secondaryCtaHref": "",
    "alignment": "center",
    "size": "tall",
    "backgroundStyle": "solid",
    "primaryCtaVariant": "secondary",
    "primaryCtaSize": "default",
    "textColor": "white",
}

BENEFITS_DEFAULTS = {
    "heading": "Benefits & perks",
    "benefits": [
        {
            "title": "Competitive salary",
            "description": "We pay at or above market for great talent.",
            "icon": "DollarSign",
            "iconColor": "",
        },
        {
            "title": "Flexible work",
            "description": "Work remotely or from our office, your choice.",
            "icon": "Home",
            "iconColor": "",
        },
    ],
    "styleVariant": "cards",
}

TEAM_DEFAULTS = {
    "heading": "Meet the team",
    "description": "Introduce key teams or share what it feels like to work here.",
    "members": [],
    "background": "plain",
    "align": "left",
}

JOBS_DEFAULTS = {
    "heading": "Open positions",
    "layout": "list",
    "density": "comfortable",
    "background": "plain",
    "emptyStateMessage": "No open positions at the moment. Check back soon!",
    "buttonVariant": "ghost",
    "badgeVariant": "secondary",
}

VIDEO_DEFAULTS = {
    "title": "Message from Us",
    "videoUrl": "",
    "description": "",
    "align": "center",
    "autoplay": False,
    "controls": True,
    "loop": False,
}

FOOTER_DEFAULTS = {
    "text": "Built with Lisco",
    "showPoweredBy": True,
}


class FieldOption(BaseModel):
    label: str
    value: str


class FieldSpec(BaseModel):
    """Editor-facing description of one configurable field."""

    name: str
    kind: Literal["text", "textarea", "select", "boolean", "array"]
    options: list[FieldOption] = Field(default_factory=list)
    item_fields: list["FieldSpec"] = Field(default_factory=list)
