"""Shared fixtures: HTML pages shaped like each site family's markup."""
from datetime import datetime
from typing import Any, Dict, List

import pytest

# Reference time used wherever relative dates are normalized
NOW = datetime(2024, 5, 20, 9, 30)


def web3_row(listing: Dict[str, Any]) -> str:
    title = listing.get('title')
    title_cell = f"<td><div><div><div><a href='#'><h2>{title}</h2></a></div></div></div></td>" \
        if title is not None else "<td></td>"
    onclick = listing.get('onclick')
    onclick_attr = f' onclick="{onclick}"' if onclick else ''
    tags = "".join(f"<span>{tag}</span>" for tag in listing.get('tags', []))
    return f"""
        <tr{onclick_attr}>
            {title_cell}
            <td><a href="/company"><h3>{listing.get('company', '')}</h3></a></td>
            <td><time datetime="{listing.get('datetime', '')}">2d</time></td>
            <td>
                {listing.get('location', '')}
            </td>
            <td><p>{listing.get('remuneration', '')}</p></td>
            <td><div>{tags}</div></td>
        </tr>"""


def web3_page(listings: List[Dict[str, Any]]) -> str:
    rows = "".join(web3_row(listing) for listing in listings)
    return f"""<!DOCTYPE html>
<html><head><title>Web3 Jobs</title></head>
<body><main><div><div><div><div><div>
<table><thead><tr><th>Job</th></tr></thead><tbody>{rows}
</tbody></table>
</div></div></div></div></div></main></body></html>"""


def cryptojobslist_row(listing: Dict[str, Any]) -> str:
    spans = "".join(f"<span>{tag}</span>" for tag in [listing.get('location', '')] + listing.get('tags', []))
    salary = listing.get('remuneration')
    salary_span = f'<span class="job-salary-text">{salary}</span>' if salary else ''
    return f"""
        <tr>
            <td><div><a href="{listing.get('href', '')}">{listing['title']}</a></div></td>
            <td><a href="/companies/x">{listing.get('company', '')}</a></td>
            <td>{spans}{salary_span}</td>
            <td class="job-time-since-creation">{listing.get('age', '')}</td>
        </tr>"""


def cryptojobslist_page(listings: List[Dict[str, Any]]) -> str:
    rows = "".join(cryptojobslist_row(listing) for listing in listings)
    return f"""<html><body>
<main><section><section><table><tbody>{rows}
</tbody></table></section></section></main>
</body></html>"""


def card(listing: Dict[str, Any]) -> str:
    return f"""
    <div>
      <div>
        <div><h4><a href="#"><div><div>{listing['title']}</div></div></a></h4></div>
        <div>
          <div>
            <div><a href="/companies/x">{listing.get('company', '')}</a></div>
            <div>
              <div><meta itemprop="address" content="{listing.get('location', '')}"></div>
              <div><div><meta itemprop="datePosted" content="{listing.get('date', '')}"></div></div>
            </div>
          </div>
        </div>
        <div class="sc-beqWaB sc-gueYoa hcVvkM MYFxR"><a href="{listing.get('href', '')}">Apply</a></div>
      </div>
    </div>"""


def card_page(listings: List[Dict[str, Any]]) -> str:
    cards = "".join(card(listing) for listing in listings)
    return f"""<html><body>
<div id="content"><div><div><div><div><div>{cards}
</div></div></div></div></div></div>
</body></html>"""


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def web3_listings() -> List[Dict[str, Any]]:
    return [
        {
            'title': 'Full Stack AI Blockchain Systems Engineer',
            'company': 'NodeAI',
            'datetime': '2024-05-06 12:05:50+07:00',
            'location': 'Remote',
            'remuneration': '$90k - $140k',
            'tags': ['solidity', 'rust'],
            'onclick': "tableTurboRowClick(event, '/full-stack-ai-blockchain-systems-engineer-nodeai/66176')",
        },
        {
            'title': 'Product Designer',
            'company': 'Pixel Labs',
            'datetime': '2024-05-05 08:00:00+00:00',
            'location': 'Berlin',
            'remuneration': '',
            'tags': ['design'],
            'onclick': "tableTurboRowClick(event, '/product-designer-pixel-labs/66001')",
        },
        {
            'title': 'Senior Smart Contract Engineer',
            'company': 'Chainworks',
            'datetime': '2024-05-04 17:45:00+02:00',
            'location': '',
            'remuneration': '$120k - $180k',
            'tags': [],
            'onclick': "tableTurboRowClick(event, '/senior-smart-contract-engineer-chainworks/65990')",
        },
    ]


@pytest.fixture
def cryptojobslist_listings() -> List[Dict[str, Any]]:
    return [
        {
            'title': 'Backend Developer',
            'company': 'Foo Protocol',
            'location': 'Remote',
            'tags': ['rust', 'defi'],
            'remuneration': '$ 90k-140k',
            'age': '3d',
            'href': '/engineering/backend-developer-foo-protocol',
        },
        {
            'title': 'Technical Writer',
            'company': 'Bar DAO',
            'location': 'Lisbon',
            'tags': [],
            'remuneration': 'EUR 50k-70k',
            'age': 'today',
            'href': '/engineering/technical-writer-bar-dao',
        },
    ]


@pytest.fixture
def card_listings() -> List[Dict[str, Any]]:
    return [
        {
            'title': 'Lead Software Engineer, Payments & Commerce',
            'company': 'Solana Foundation',
            'location': 'Remote',
            'date': '2024-05-06',
            'href': '/companies/solana-foundation-2/jobs/36564322-lead-software-engineer-payments-commerce#content',
        },
        {
            'title': 'Protocol Engineer',
            'company': 'Helius',
            'location': 'New York, NY',
            'date': '2024-05-02',
            'href': 'https://jobs.ashbyhq.com/helius/protocol-engineer',
        },
    ]


@pytest.fixture
def web3_html(web3_listings) -> str:
    return web3_page(web3_listings)


@pytest.fixture
def cryptojobslist_html(cryptojobslist_listings) -> str:
    return cryptojobslist_page(cryptojobslist_listings)


@pytest.fixture
def card_html(card_listings) -> str:
    return card_page(card_listings)


@pytest.fixture
def empty_web3_html() -> str:
    return web3_page([])


@pytest.fixture
def build_web3_page():
    return web3_page


@pytest.fixture
def build_card_page():
    return card_page
