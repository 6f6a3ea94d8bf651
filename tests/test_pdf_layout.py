"""
Layout testovi - crtanje jedne uplatnice na mock canvas-u.
"""
import os
import shutil

import pytest
from decimal import Decimal
from unittest.mock import MagicMock

from uplatnice.services.billing_context import ApartmentInfo, BuildingInfo
from uplatnice.services.pdf_service import (
    FONT_FILE, FONT_FILE_BOLD, SlipLayoutEngine, SlipSettings, format_display_amount, load_fonts,
)
from uplatnice.services.qr_image_service import LocalQRImageProvider
from uplatnice.services.ips_service import IPSPayload, IPSPayloadBuilder


@pytest.fixture(scope='module', autouse=True)
def fonts():
    load_fonts()


@pytest.fixture
def canvas():
    return MagicMock()


@pytest.fixture
def layout():
    return SlipLayoutEngine()


@pytest.fixture
def qr_png():
    payload = IPSPayload({'K': 'PR', 'V': '01', 'C': '1', 'R': '160000000054891267', 'RO': '0503'})
    return LocalQRImageProvider().fetch(payload, 120)


def _drawn_strings(c):
    texts = []
    for method in ('drawString', 'drawRightString', 'drawCentredString'):
        for call in getattr(c, method).call_args_list:
            texts.append(call.args[2])
    return texts


class TestDisplayAmount:

    @pytest.mark.parametrize('amount, expected', [
        (Decimal('3500'), '3.500,00'),
        (Decimal('4200.5'), '4.200,50'),
        (Decimal('1234567.891'), '1.234.567,89'),
        (Decimal('99'), '99,00'),
    ])
    def test_serbian_grouping(self, amount, expected):
        assert format_display_amount(amount) == expected


class TestDrawSlip:

    def test_content_is_drawn(self, layout, canvas, apartment_info, building_info, period):
        layout.draw_slip(canvas, apartment_info, building_info, period, 0)

        texts = _drawn_strings(canvas)
        assert 'НАЛОГ ЗА УПЛАТУ' in texts
        assert '05/03' in texts
        assert '160-0000000548912-67' in texts
        assert 'RSD' in texts
        assert 'Petar Petrović' in texts
        assert 'Mesečno održavanje zgrade' in texts

    def test_amount_right_aligned(self, layout, canvas, apartment_info, building_info, period):
        layout.draw_slip(canvas, apartment_info, building_info, period, 1)

        right_aligned = [call.args[2] for call in canvas.drawRightString.call_args_list]
        assert '3.500,00' in right_aligned

    def test_override_amount(self, layout, canvas, building_info, period):
        apartment = ApartmentInfo(apartment_number=4, owner_name='Ana Anić', floor_number=1,
                                  override_amount=Decimal('4200.00'))
        layout.draw_slip(canvas, apartment, building_info, period, 0)

        assert '4.200,00' in _drawn_strings(canvas)
        assert '3.500,00' not in _drawn_strings(canvas)

    @pytest.mark.parametrize('slot, has_cut_line', [(0, True), (1, True), (2, False)])
    def test_cut_line_only_between_slips(self, layout, canvas, apartment_info, building_info,
                                         period, slot, has_cut_line):
        layout.draw_slip(canvas, apartment_info, building_info, period, slot)

        assert canvas.setDash.called is has_cut_line
        if has_cut_line:
            canvas.setDash.assert_called_with(5, 3)

    def test_cut_line_position(self, layout, canvas):
        layout.draw_cut_line(canvas, 0)

        y = SlipLayoutEngine.PAGE_HEIGHT - SlipLayoutEngine.SLIP_HEIGHT
        canvas.line.assert_called_once_with(0, y, SlipLayoutEngine.PAGE_WIDTH, y)

    def test_without_qr(self, layout, canvas, apartment_info, building_info, period):
        layout.draw_slip(canvas, apartment_info, building_info, period, 0, qr_image=None)

        canvas.drawImage.assert_not_called()
        canvas.clipPath.assert_not_called()

    def test_with_qr(self, layout, canvas, apartment_info, building_info, period, qr_png):
        layout.draw_slip(canvas, apartment_info, building_info, period, 2, qr_image=qr_png)

        canvas.drawImage.assert_called_once()
        canvas.clipPath.assert_called_once()
        kwargs = canvas.drawImage.call_args.kwargs
        assert kwargs['width'] == SlipLayoutEngine.QR_SIZE
        assert kwargs['height'] == SlipLayoutEngine.QR_SIZE

    def test_qr_crop(self, layout, canvas, qr_png):
        layout._draw_qr(canvas, qr_png, 100, 200)

        path = canvas.beginPath.return_value
        image_bottom = SlipLayoutEngine.PAGE_HEIGHT - 200 - SlipLayoutEngine.QR_SIZE
        path.rect.assert_called_once_with(
            100, image_bottom + SlipLayoutEngine.QR_CROP_BOTTOM,
            SlipLayoutEngine.QR_SIZE, SlipLayoutEngine.QR_SIZE - SlipLayoutEngine.QR_CROP_BOTTOM,
        )

    @pytest.mark.parametrize('slot', [-1, 3, 10])
    def test_invalid_slot(self, layout, canvas, apartment_info, building_info, period, slot):
        with pytest.raises(ValueError):
            layout.draw_slip(canvas, apartment_info, building_info, period, slot)

    def test_state_is_balanced(self, layout, canvas, apartment_info, building_info, period, qr_png):
        layout.draw_slip(canvas, apartment_info, building_info, period, 0, qr_image=qr_png)

        assert canvas.saveState.call_count == canvas.restoreState.call_count


class TestLayoutParts:

    def test_slot_offsets(self):
        assert SlipLayoutEngine.slot_offset(0) == 0
        assert SlipLayoutEngine.slot_offset(2) == 2 * SlipLayoutEngine.SLIP_HEIGHT
        assert SlipLayoutEngine.SLIP_HEIGHT * 3 == pytest.approx(SlipLayoutEngine.PAGE_HEIGHT)

    def test_sections_fill_content_width(self):
        total = SlipLayoutEngine.LEFT_WIDTH + SlipLayoutEngine.RIGHT_WIDTH
        assert total == pytest.approx(SlipLayoutEngine.CONTENT_WIDTH)

    def test_labeled_box_returns_bottom(self, layout, canvas):
        bottom = layout._draw_labeled_box(canvas, 40, 100, 200, 42, 'уплатилац', ['a', 'b'])
        assert bottom == 100 + SlipLayoutEngine.LABEL_ADVANCE + 42

    def test_payer_lines(self, layout, apartment_info, building_info):
        assert layout.payer_lines(apartment_info, building_info) == [
            'Petar Petrović',
            'Marka Čelebonovića 73, спрат 2, стан 5',
            'Beograd',
        ]

    def test_recipient_line_uses_building_name(self, layout, building_info):
        assert layout.recipient_line(building_info) == 'Stambena zajednica Marka Čelebonovića 73, Beograd'

    def test_settings_override_texts(self, building_info):
        layout = SlipLayoutEngine(SlipSettings(payment_purpose='Održavanje', recipient_prefix='SZ'))
        assert layout.payment_purpose(building_info) == 'Održavanje'
        assert layout.recipient_line(building_info).startswith('SZ Marka')

    def test_settings_from_config(self):
        settings = SlipSettings.from_config({'SLIP_PAYMENT_PURPOSE': 'Test', 'SLIP_RECIPIENT_PREFIX': None})
        assert settings.payment_purpose == 'Test'
        assert settings.recipient_prefix is None

    def test_long_text_is_shortened(self, layout):
        text = layout._fit_text('X' * 500, 'SlipSans', 9, 100)
        assert text.endswith('…')
        assert len(text) < 500


class TestBoxWrapping:

    @pytest.fixture
    def long_address_building(self):
        return BuildingInfo(
            address='Bulevar kralja Aleksandra 123',
            city='Novi Beograd',
            bank_account='16054891267',
            default_amount=Decimal('3500.00'),
        )

    def test_recipient_wraps_to_second_line(self, layout, canvas, apartment_info,
                                            long_address_building, period):
        layout.draw_slip(canvas, apartment_info, long_address_building, period, 0)

        texts = _drawn_strings(canvas)
        assert any('Novi Beograd' in t for t in texts)
        assert not any(t.startswith('Stambena zajednica') and t.endswith('…') for t in texts)

    def test_box_keeps_line_limit(self, layout, canvas):
        long_text = ' '.join(['Reč'] * 200)
        layout._draw_labeled_box(canvas, 40, 100, 200, SlipLayoutEngine.RECIPIENT_BOX_HEIGHT,
                                 'прималац', [long_text])

        content = [call.args[2] for call in canvas.drawString.call_args_list
                   if call.args[2].startswith('Reč')]
        assert len(content) == 2
        assert not content[0].endswith('…')
        assert content[1].endswith('…')

    def test_short_lines_unchanged(self, layout):
        assert layout._wrap_lines(['a', '', 'b'], 200, 3) == ['a', '', 'b']


class TestAmountRounding:

    def test_half_up_like_qr(self):
        assert format_display_amount(Decimal('1234.565')) == '1.234,57'
        assert IPSPayloadBuilder.format_amount(Decimal('1234.565')) == 'RSD1234,57'

    def test_float_input(self):
        assert format_display_amount(0.125) == '0,13'


class TestFontLoading:

    def test_other_directory_is_registered(self, tmp_path):
        default_dir = load_fonts()
        for name in (FONT_FILE, FONT_FILE_BOLD):
            shutil.copy(os.path.join(default_dir, name), tmp_path / name)

        try:
            assert load_fonts(str(tmp_path)) == str(tmp_path)
            assert load_fonts(str(tmp_path)) == str(tmp_path)
        finally:
            assert load_fonts() == default_dir
