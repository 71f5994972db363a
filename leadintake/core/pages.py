import os
from typing import Any, Dict

import jinja2

# leadintake/core/pages.py -> leadintake/templates
BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
TEMPLATE_DIR = os.path.join(BASE_DIR, "templates")

template_loader = jinja2.FileSystemLoader(searchpath=TEMPLATE_DIR)
template_env = jinja2.Environment(loader=template_loader, autoescape=True)


def render_template(template_name: str, context: Dict[str, Any]) -> str:
    template = template_env.get_template(template_name)
    return template.render(**context)


def render_status_page(message: str, site_name: str, home_url: str = "/") -> str:
    """Minimal page shown to browser form posts when a submission is refused"""
    return render_template(
        "status.html",
        {"message": message, "site_name": site_name, "home_url": home_url},
    )
