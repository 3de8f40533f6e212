"""
Tests for training request building.
"""

import unittest

from cleanview.errors import TrainingValidationError
from cleanview.training import NEURAL_ALGORITHMS, TrainingRequest, build_hyperparameters, known_algorithms


class TestTrainingRequest(unittest.TestCase):

    def make(self, **overrides):
        fields = dict(dataset_id=3, name='m', algorithm='svm', target_variable='y', features=['a', 'b'])
        fields.update(overrides)
        return TrainingRequest(**fields)

    def test_payload(self):
        payload = self.make().to_payload('user-1')
        self.assertEqual(payload['user_id'], 'user-1')
        self.assertEqual(payload['features'], ['a', 'b'])
        self.assertEqual(payload['hyperparameters'], {})
        self.assertEqual(payload['test_size'], 0.2)
        self.assertEqual(payload['random_state'], 42)

    def test_payload_builds_hyperparameters_for_algorithm(self):
        payload = self.make(algorithm='random_forest').to_payload()
        self.assertEqual(payload['hyperparameters'], {'n_estimators': 100, 'random_state': 42})
        self.assertNotIn('user_id', payload)

    def test_neural_hyperparameters(self):
        params = build_hyperparameters('lstm', epochs=5, batch_size=8, learning_rate=0.01)
        self.assertEqual(params['epochs'], 5)
        self.assertEqual(params['hidden_layers'], [128, 64, 32])
        self.assertTrue(set(NEURAL_ALGORITHMS) <= set(known_algorithms()))

    def test_validate(self):
        self.make().validate()
        for missing in ({'name': ''}, {'target_variable': ''}, {'features': []}, {'dataset_id': None}):
            with self.assertRaises(TrainingValidationError):
                self.make(**missing).validate()

    def test_validate_test_size(self):
        with self.assertRaises(TrainingValidationError):
            self.make(test_size=1.0).validate()


if __name__ == '__main__':
    unittest.main()
