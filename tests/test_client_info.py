import sys
import os

# Add the parent directory to sys.path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from extractors.client_info import extract_client_info, payment_verified
from extractors.dom import load_document


def _container(inner_html):
    soup = load_document(f'<aside class="sidebar"><div data-test="about-client-container">{inner_html}</div></aside>')
    return soup.select_one(".sidebar")


def test_missing_container_skips_every_probe():
    soup = load_document("<aside class='sidebar'><p>No client card</p></aside>")

    assert extract_client_info(soup.select_one(".sidebar")) == {}
    assert extract_client_info(None) == {}


def test_payment_not_verified_is_kept():
    info = extract_client_info(_container("<div>Payment method not verified</div>"))

    assert info == {"client_payment_verified": False}


def test_payment_unknown_is_absent():
    about = load_document("<div>Member since 2020</div>").div

    assert payment_verified(about) is None


def test_probes_are_independent():
    info = extract_client_info(_container(
        '<div data-qa="client-job-posting-stats"><strong>3 jobs posted</strong></div>'
        '<div data-qa="client-hires"><span>4 hires</span></div>'
        '<div data-qa="client-contract-date"><small>Member since Jan 5, 2021</small></div>'
    ))

    assert info == {
        "client_jobs_posted": "3",
        "client_total_hires": "4",
        "client_member_since": "Jan 5, 2021",
    }


def test_alternate_container_class():
    soup = load_document(
        '<div class="sidebar"><section class="cfe-ui-job-about-client">'
        '<div data-qa="client-company-profile-industry">Retail</div>'
        "</section></div>"
    )

    assert extract_client_info(soup.select_one(".sidebar")) == {"client_industry": "Retail"}
