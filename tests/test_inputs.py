import unittest

from bc_solar.inputs import (
    BatteryStorage,
    CalculationInput,
    InputValidationError,
    InstallationType,
    PanelQuality,
    RateTier,
)


VALID_FORM = {
    'system_size_kw': 100,
    'monthly_usage_kwh': 20000,
    'current_monthly_bill_cad': 2500,
    'rate_tier': 'Medium General Service',
    'installation_type': 'Roof-Mount',
    'panel_quality': 'Standard Efficiency',
    'battery_storage': 'No Battery',
    'location_region': 'Vancouver',
}


def form(**overrides):
    data = dict(VALID_FORM)
    data.update(overrides)
    return data


class TestCalculationInput(unittest.TestCase):
    def test_labels_resolve_to_enums(self):
        inputs = CalculationInput.from_dict(form())
        self.assertIs(RateTier.MEDIUM_GENERAL, inputs.rate_tier)
        self.assertIs(InstallationType.ROOF_MOUNT, inputs.installation_type)
        self.assertIs(PanelQuality.STANDARD, inputs.panel_quality)
        self.assertIs(BatteryStorage.NONE, inputs.battery_storage)
        self.assertEqual(100.0, inputs.system_size_kw)

    def test_member_names_are_accepted(self):
        inputs = CalculationInput.from_dict(form(
            rate_tier='SmallGeneral',
            installation_type='Tracker',
            panel_quality='PremiumTier1',
            battery_storage='BatteryCustom200kWhPlus',
        ))
        self.assertIs(RateTier.SMALL_GENERAL, inputs.rate_tier)
        self.assertIs(InstallationType.TRACKER, inputs.installation_type)
        self.assertIs(PanelQuality.PREMIUM_TIER_1, inputs.panel_quality)
        self.assertIs(BatteryStorage.BATTERY_CUSTOM_200_KWH_PLUS, inputs.battery_storage)

    def test_non_positive_numbers_are_rejected(self):
        for field in ('system_size_kw', 'monthly_usage_kwh', 'current_monthly_bill_cad'):
            for value in (0, -10, None, 'abc', float('nan'), float('inf'), True):
                with self.subTest(field=field, value=value):
                    with self.assertRaises(InputValidationError) as ctx:
                        CalculationInput.from_dict(form(**{field: value}))
                    self.assertEqual(field, ctx.exception.field)

    def test_infinite_size_is_rejected(self):
        with self.assertRaises(InputValidationError) as ctx:
            CalculationInput.from_dict(form(system_size_kw=float('inf')))
        self.assertEqual('system_size_kw', ctx.exception.field)

    def test_numeric_strings_are_accepted(self):
        inputs = CalculationInput.from_dict(form(system_size_kw='150.5'))
        self.assertEqual(150.5, inputs.system_size_kw)

    def test_unrecognized_options_are_rejected(self):
        for field, value in [
            ('installation_type', 'Floating Array'),
            ('panel_quality', 'Budget'),
            ('battery_storage', '20kWh Home Battery'),
        ]:
            with self.subTest(field=field):
                with self.assertRaises(InputValidationError) as ctx:
                    CalculationInput.from_dict(form(**{field: value}))
                self.assertEqual(field, ctx.exception.field)

    def test_missing_option_is_rejected(self):
        with self.assertRaises(InputValidationError):
            CalculationInput.from_dict(form(panel_quality=''))
        with self.assertRaises(InputValidationError):
            CalculationInput.from_dict(form(rate_tier=None))

    def test_unrecognized_rate_tier_is_kept(self):
        inputs = CalculationInput.from_dict(form(rate_tier='Legacy Commercial'))
        self.assertEqual('Legacy Commercial', inputs.rate_tier)
        self.assertEqual('Legacy Commercial', inputs.rate_tier_label)

    def test_missing_key(self):
        data = form()
        del data['current_monthly_bill_cad']
        with self.assertRaises(InputValidationError) as ctx:
            CalculationInput.from_dict(data)
        self.assertEqual('current_monthly_bill_cad', ctx.exception.field)

    def test_location_is_optional(self):
        data = form()
        del data['location_region']
        self.assertEqual('', CalculationInput.from_dict(data).location_region)

    def test_validation_error_is_a_value_error(self):
        self.assertTrue(issubclass(InputValidationError, ValueError))

    def test_inputs_are_immutable(self):
        inputs = CalculationInput.from_dict(form())
        with self.assertRaises(AttributeError):
            inputs.system_size_kw = 5

    def test_to_dict_uses_labels(self):
        data = CalculationInput.from_dict(form(installation_type='GroundMount')).to_dict()
        self.assertEqual('Ground-Mount', data['installation_type'])
        self.assertEqual('Medium General Service', data['rate_tier'])


if __name__ == "__main__":
    unittest.main()
