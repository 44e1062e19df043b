"""Tests for multi-site orchestration."""
import io
import time
from unittest.mock import Mock, patch

import pytest
import requests

from jobhunt.core import ScrapeReport, scrape_all
from jobhunt.errors import RequestError
from jobhunt.fetchers import Fetcher
from jobhunt.filters import JobFilter
from jobhunt.models import Job
from jobhunt.sites import SITES, SiteId, get_site


def make_job(title, site_id, **kwargs):
    return Job(title=title, company="Acme", date_posted="2024-05-01", site=site_id, **kwargs)


@pytest.fixture
def fake_fetcher():
    """Fetcher double returning two jobs per site."""
    fetcher = Mock(spec=Fetcher)

    def scrape(site, now=None):
        return [
            make_job(f"{site.name} Rust Engineer", site.site_id),
            make_job(f"{site.name} Office Manager", site.site_id),
        ]

    fetcher.scrape.side_effect = scrape
    return fetcher


def failing_on(fetcher, failing_site_id):
    original = fetcher.scrape.side_effect

    def scrape(site, now=None):
        if site.site_id is failing_site_id:
            raise RequestError(f"{site.url}?page=1", "Request failed with code 500", status_code=500)
        return original(site, now)

    fetcher.scrape.side_effect = scrape
    return fetcher


def test_end_to_end_scrape_then_filter(web3_html, empty_web3_html, now):
    """One paginated site, three listings, two of them engineering roles."""
    session = requests.Session()
    site = get_site(SiteId.WEB3_CAREERS)

    def get(url, timeout=None, stream=False):
        response = requests.Response()
        response.status_code = 200
        body = web3_html if url.endswith("page=1") else empty_web3_html
        response.raw = io.BytesIO(body.encode('utf-8'))
        response.headers['Content-Type'] = "text/html; charset=utf-8"
        return response

    with patch.object(session, 'get', side_effect=get):
        report = scrape_all([site], fetcher=Fetcher(session=session), job_filter=JobFilter(), clock=lambda: now)

    assert len(report.jobs) == 2
    assert report.counts == {SiteId.WEB3_CAREERS: 3}
    for job in report.jobs:
        assert job.site is SiteId.WEB3_CAREERS
        assert job.title
        assert "Engineer" in job.title
        assert job.apply == "" or job.apply.startswith(("https", "mailto"))


def test_results_follow_registry_order(fake_fetcher):
    report = scrape_all(SITES, fetcher=fake_fetcher)

    assert [job.site for job in report.jobs[::2]] == [site.site_id for site in SITES]
    assert len(report.jobs) == 10
    assert report.ok


def test_filter_applies_after_counting(fake_fetcher):
    report = scrape_all(SITES, fetcher=fake_fetcher, job_filter=JobFilter())

    assert all("Engineer" in job.title for job in report.jobs)
    assert len(report.jobs) == 5
    assert set(report.counts.values()) == {2}


def test_clock_is_read_once(fake_fetcher, now):
    clock = Mock(return_value=now)

    scrape_all(SITES, fetcher=fake_fetcher, clock=clock)

    clock.assert_called_once_with()
    for call in fake_fetcher.scrape.call_args_list:
        assert call.args[1] == now


def test_fail_fast_stops_at_first_failure(fake_fetcher):
    failing_on(fake_fetcher, SiteId.CRYPTO_JOBS_LIST)

    with pytest.raises(RequestError) as exc_info:
        scrape_all(SITES, fetcher=fake_fetcher)

    assert fake_fetcher.scrape.call_count == 2
    assert exc_info.value.status_code == 500


def test_keep_going_returns_partial_results(fake_fetcher, caplog):
    failing_on(fake_fetcher, SiteId.CRYPTO_JOBS_LIST)

    report = scrape_all(SITES, fetcher=fake_fetcher, fail_fast=False)

    assert not report.ok
    assert list(report.errors) == [SiteId.CRYPTO_JOBS_LIST]
    assert SiteId.CRYPTO_JOBS_LIST not in report.counts
    assert len(report.jobs) == 8
    assert fake_fetcher.scrape.call_count == 5
    assert "Skipping cryptojobslist" in caplog.text


def test_parallel_scrape_keeps_registry_order(fake_fetcher):
    original = fake_fetcher.scrape.side_effect
    delays = {site.site_id: 0.05 * (len(SITES) - i) for i, site in enumerate(SITES)}

    def slow_scrape(site, now=None):
        # Earlier sites finish last
        time.sleep(delays[site.site_id])
        return original(site, now)

    fake_fetcher.scrape.side_effect = slow_scrape

    report = scrape_all(SITES, fetcher=fake_fetcher, workers=5)

    assert [job.site for job in report.jobs[::2]] == [site.site_id for site in SITES]


def test_parallel_fail_fast(fake_fetcher):
    failing_on(fake_fetcher, SiteId.NEAR_JOBS)

    with pytest.raises(RequestError):
        scrape_all(SITES, fetcher=fake_fetcher, workers=3)


def test_parallel_keep_going(fake_fetcher):
    failing_on(fake_fetcher, SiteId.SOLANA_JOBS)

    report = scrape_all(SITES, fetcher=fake_fetcher, workers=3, fail_fast=False)

    assert list(report.errors) == [SiteId.SOLANA_JOBS]
    assert len(report.jobs) == 8


def test_creates_and_closes_own_fetcher():
    with patch('jobhunt.core.Fetcher') as fetcher_cls:
        fetcher_cls.return_value.scrape.return_value = []
        report = scrape_all(SITES[:1])

    fetcher_cls.return_value.close.assert_called_once_with()
    assert report == ScrapeReport(jobs=[], counts={SiteId.WEB3_CAREERS: 0})


def test_own_fetcher_closed_on_failure():
    with patch('jobhunt.core.Fetcher') as fetcher_cls:
        fetcher_cls.return_value.scrape.side_effect = RequestError("https://web3.career?page=1", "boom")
        with pytest.raises(RequestError):
            scrape_all(SITES[:1])

    fetcher_cls.return_value.close.assert_called_once_with()


def test_injected_fetcher_is_not_closed(fake_fetcher):
    scrape_all(SITES[:2], fetcher=fake_fetcher)

    fake_fetcher.close.assert_not_called()


def test_duplicate_sites_are_scraped_once(fake_fetcher):
    near = get_site(SiteId.NEAR_JOBS)
    web3 = get_site(SiteId.WEB3_CAREERS)

    report = scrape_all([near, web3, near], fetcher=fake_fetcher)

    assert [call.args[0] for call in fake_fetcher.scrape.call_args_list] == [near, web3]
    assert len(report.jobs) == 4
    assert report.counts == {SiteId.NEAR_JOBS: 2, SiteId.WEB3_CAREERS: 2}


def test_duplicate_sites_in_parallel(fake_fetcher):
    near = get_site(SiteId.NEAR_JOBS)

    report = scrape_all([near, near], fetcher=fake_fetcher, workers=2)

    fake_fetcher.scrape.assert_called_once()
    assert len(report.jobs) == 2


def test_parallel_workers_use_separate_sessions(web3_html, empty_web3_html, now):
    fetcher = Fetcher()
    seen = {}

    def get(session):
        def send(url, timeout=None, stream=False):
            seen.setdefault(id(session), set()).add(url)
            time.sleep(0.01)
            response = requests.Response()
            response.status_code = 200
            body = web3_html if url.endswith("page=1") else empty_web3_html
            response.raw = io.BytesIO(body.encode('utf-8'))
            response.headers['Content-Type'] = "text/html; charset=utf-8"
            return response
        return send

    sessions = []
    real_session = requests.Session

    def new_session():
        session = real_session()
        session.get = get(session)
        sessions.append(session)
        return session

    sites = [get_site(SiteId.WEB3_CAREERS), get_site(SiteId.NEAR_JOBS)]
    with patch('jobhunt.fetchers.base_fetcher.requests.Session', side_effect=new_session):
        report = scrape_all(sites, fetcher=fetcher, workers=2, fail_fast=False, clock=lambda: now)

    assert len(sessions) == 2
    assert len(seen) == 2
    assert report.counts[SiteId.WEB3_CAREERS] == 3
