"""Prompt construction for artwork and mockup generation."""

from dataclasses import dataclass

from snap_merch.domain.products import ProductOption
from snap_merch.domain.styles import StyleConfig
from snap_merch.domain.vehicles import VehicleIdentity

DEFAULT_BODY_COLOR = "#003366"
DEFAULT_CANVAS_COLOR = "#FFFFFF"
DEFAULT_VIEW = "3/4 Front"

_VIEW_PROMPTS = {
    "Front": (
        "ORIENTATION: Strictly head-on, direct front view. Perfectly level and "
        "centered. Front grille and lights dominant. WHEELS: Straight ahead."
    ),
    "Rear": (
        "ORIENTATION: Strictly direct rear view. Centered. Tail lights and "
        "exhaust dominant."
    ),
    "3/4 Front": "ORIENTATION: Classic 3/4 Front perspective view.",
    "3/4 Rear": "ORIENTATION: Classic 3/4 Rear perspective view.",
    "Side": "ORIENTATION: Perfect side profile view. 90-degree lateral angle.",
    "Top": "ORIENTATION: Direct top-down view (bird's eye). Wheels HIDDEN.",
}

_DETAILING = (
    "SOLIDITY: The vehicle body panels MUST be 100% SOLID and OPAQUE. "
    "WINDOWS: Subtly translucent glass. "
    "WHEELS: Render with high precision and realistic depth."
)

_ORGANIC_EDGE = (
    "BOUNDARY: The image must have soft, undefined boundaries. "
    "EDGE: The image should have an organic, non-rectilinear edge "
    "(no hard rectangular frame). "
    "COMPOSITION: The car should appear to float gracefully on the page."
)


@dataclass(frozen=True)
class _StyleTemplate:
    # {body} is replaced with the body color. A background of None renders the
    # flat canvas block, "" renders nothing.
    text: str
    organic_edge: bool = False
    background: str | None = None


_STYLE_TEMPLATES: dict[str, _StyleTemplate] = {
    "Vector (Monochromatic)": _StyleTemplate(
        "STYLE: 2D flat minimalist illustration. "
        "MONOCHROME: Use ONLY shades/tints of {body}."
    ),
    "Vintage Poster": _StyleTemplate(
        "STYLE: Mid-century travel poster. Limited palette. Flat graphic shapes. "
        "Elegant composition."
    ),
    "Distressed": _StyleTemplate(
        "STYLE: Aged retro poster. Worn textures. Faded edges. COLOR: {body}.",
        background="",
    ),
    "Neon Sign": _StyleTemplate(
        "STYLE: Glowing neon tube sign. Electric energy highlights. COLOR: {body}.",
        organic_edge=True,
    ),
    "Watercolor": _StyleTemplate(
        "STYLE: Expressive watercolor painting. Bleeding edges and splatters. "
        "COLOR: {body}.",
        organic_edge=True,
        background="#FFFFFF",
    ),
    "Comic Book": _StyleTemplate(
        "STYLE: Bold comic book illustration. Thick black outlines. Halftone dot "
        "shading. Bright saturated primary colors. Explosive POW/BOOM energy feel. "
        "Speed lines and action. COLOR: {body}.",
        organic_edge=True,
    ),
    "Blueprint Style": _StyleTemplate(
        "STYLE: Technical engineering blueprint drawing. White/light cyan lines on "
        "dark navy blue background. Grid lines visible. Dimension annotations and "
        "technical callouts. Schematic precision. COLOR: white lines.",
        background="#003366",
    ),
    "Pop Art": _StyleTemplate(
        "STYLE: 1960s Pop Art. Bold halftone dots. High contrast. Saturated colors.",
        organic_edge=True,
    ),
    "Pencil Sketch": _StyleTemplate(
        "STYLE: Detailed realistic pencil sketch. Graphite on white paper. Visible "
        "pencil strokes. Cross-hatching for shadows. Light construction lines. "
        "Artistic hand-drawn feel. COLOR: graphite gray tones."
    ),
    "Synthwave 80s": _StyleTemplate(
        "STYLE: 80s Synthwave retrowave. Neon pink and cyan grid receding to "
        "horizon. Sunset gradient (purple to orange). Chrome-reflective car body. "
        "VHS scan lines. Retro-futuristic. COLOR: {body} with neon reflections.",
        organic_edge=True,
        background="#1a0033",
    ),
    "Lowrider Airbrush": _StyleTemplate(
        "STYLE: Chicano lowrider airbrush art. Smooth gradient airbrush technique. "
        "Metallic candy paint effect with flake sparkle. Custom pinstripe accents. "
        "Mural-quality artwork. Street culture aesthetic. "
        "COLOR: {body} with custom candy paint sheen.",
        organic_edge=True,
    ),
    "JDM Japanese": _StyleTemplate(
        "STYLE: Japanese JDM car culture art. Drift aesthetic with tire smoke. "
        "Kanji/katakana typography integrated. Neon-lit Tokyo street backdrop "
        "hints. Rising sun motif. Sticker-bomb texture accents. Import tuner "
        "magazine cover feel. COLOR: {body}.",
        organic_edge=True,
        background="#000000",
    ),
}


def get_style_instruction(
    art_style: str,
    color: str | None = None,
    background_color: str | None = None,
    view: str = DEFAULT_VIEW,
) -> str:
    """Return the rendering instruction block for an art style, or ""."""
    template = _STYLE_TEMPLATES.get(art_style)
    if template is None:
        return ""
    parts = [
        template.text.format(body=color or DEFAULT_BODY_COLOR),
        _VIEW_PROMPTS.get(view, f"ORIENTATION: {view} view."),
        _DETAILING,
    ]
    if template.organic_edge:
        parts.append(_ORGANIC_EDGE)
    if template.background is None:
        parts.append(_canvas_block(background_color or DEFAULT_CANVAS_COLOR))
    elif template.background:
        parts.append(f"BACKGROUND: {template.background}.")
    return " ".join(parts)


def build_style_prompt(
    identity: VehicleIdentity, style: StyleConfig, *, has_reference: bool
) -> str:
    """Build the full generation prompt for one style of a vehicle."""
    full_name = " ".join(
        part
        for part in (identity.year, identity.make, identity.model, identity.trim)
        if part
    )
    instruction = get_style_instruction(
        style.art_style,
        color=style.color or identity.color.hex or DEFAULT_BODY_COLOR,
        background_color=style.background_color,
    )
    if style.id == "calligram":
        typography = (
            f'TYPOGRAPHY: Add bold art title "{identity.display_name}". '
            f'Include stylized typography of "{identity.display_name}" '
            "integrated into the design."
        )
    else:
        typography = "DO NOT add any text or labels."
    if has_reference:
        subject = "the vehicle shown in the reference image"
    else:
        subject = (
            "a high-resolution, professional-grade studio photograph "
            f"illustration of a {full_name}"
        )
    prompt = (
        f"{subject}. {instruction} "
        f"GROUNDING: Use the authentic visual details of a {identity.display_name}. "
        f"Centered square composition. {DEFAULT_VIEW} view. {typography}"
    )
    if has_reference:
        return (
            "Using the reference image AS THE ONLY SOURCE for features, create: "
            f"{prompt}"
        )
    return prompt


def build_tweak_prompt(
    instruction: str, style: StyleConfig, identity: VehicleIdentity
) -> str:
    """Build the edit prompt that applies a vendor tweak to an existing design."""
    keep = get_style_instruction(
        style.art_style,
        color=style.color or identity.color.hex or DEFAULT_BODY_COLOR,
        background_color=style.background_color,
    )
    return (
        f'Modify this car art: "{instruction.strip()}". '
        f"MAINTAIN STYLE: {keep} Current orientation: {DEFAULT_VIEW}."
    )


def build_mockup_prompt(
    product: ProductOption, color_name: str, color_hex: str, car_description: str
) -> str:
    """Build an e-commerce mockup prompt for a product."""
    subject = car_description or "automotive art"
    if product.id == "mug":
        return (
            f"Create a professional e-commerce product mockup photo of a {color_name} "
            "ceramic coffee mug with the provided artwork printed on its side, "
            "wrapping naturally around the curved surface. The mug sits on a clean "
            f"wooden table in soft morning light. Mug color {color_hex}. This is "
            f"{subject}; the printed design must faithfully reproduce the artwork."
        )
    if product.id == "poster":
        return (
            "Create a professional interior mockup showing the provided artwork as "
            "a framed poster on a clean, modern light wall with natural light. "
            f"This is {subject}; the print must faithfully reproduce the artwork."
        )
    return (
        f"Create a professional e-commerce mockup of a {color_name} ({color_hex}) "
        f"{product.name.lower()} on a studio background with the provided artwork "
        f"printed centered on the chest. This is {subject}; the print must "
        "faithfully reproduce the artwork."
    )


def _canvas_block(canvas: str) -> str:
    return (
        "BACKGROUND: The output image MUST be rendered on a solid, clean, and "
        f"perfectly flat background of EXACT COLOR: {canvas}. No gradients, no "
        "textures, no patterns, and no background shadows. "
        "ISOLATION: The car must be perfectly isolated with no other background "
        "elements."
    )
