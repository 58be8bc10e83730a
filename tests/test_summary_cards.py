from src.dashboard.components.summary_cards import result_card_values
from src.data.api_client import parse_calculation_result


def test_result_card_values_cover_every_field(result_payload) -> None:
    cards = dict(result_card_values(parse_calculation_result(result_payload)))
    assert cards == {
        'Scheme Name': 'Aditya Birla Sun Life Large Cap Fund - Growth',
        'Total Investment': '₹180,000.00',
        'Current Value': '₹221,456.78',
        'Absolute Returns': '₹41,456.78',
        'Returns (%)': '23.03%',
        'Number of Installments': '36',
        'Average NAV': '₹389.1234',
        'Highest NAV': '₹455.61',
        'Lowest NAV': '₹301.02',
    }
