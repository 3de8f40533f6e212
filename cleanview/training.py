"""
Building and validating model-training requests.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .errors import TrainingValidationError

NEURAL_ALGORITHMS = ('neural_network', 'cnn', 'lstm')

ALGORITHM_OPTIONS = {
    'Scikit-learn': {
        'random_forest': 'Random Forest',
        'linear_regression': 'Linear Regression',
        'logistic_regression': 'Logistic Regression',
        'svm': 'SVM',
    },
    'PyTorch': {
        'neural_network': 'Neural Network (MLP)',
        'cnn': 'CNN (Convolutional)',
        'lstm': 'LSTM (Recurrent)',
    },
}


def known_algorithms() -> List[str]:
    return [name for group in ALGORITHM_OPTIONS.values() for name in group]


def build_hyperparameters(
    algorithm: str,
    epochs: int = 100,
    batch_size: int = 32,
    learning_rate: float = 0.001,
) -> Dict[str, Any]:
    """Default hyperparameters sent with each algorithm."""
    if algorithm in NEURAL_ALGORITHMS:
        return {
            'epochs': epochs,
            'batch_size': batch_size,
            'learning_rate': learning_rate,
            'hidden_layers': [128, 64, 32],
            'dropout': 0.2,
        }
    if algorithm == 'random_forest':
        return {'n_estimators': 100, 'random_state': 42}
    if algorithm == 'logistic_regression':
        return {'max_iter': 1000, 'random_state': 42}
    return {}


@dataclass
class TrainingRequest:
    """Parameters of a ``/train`` call."""
    dataset_id: Any
    name: str
    algorithm: str
    target_variable: str
    features: List[str] = field(default_factory=list)
    hyperparameters: Optional[Dict[str, Any]] = None
    test_size: float = 0.2
    random_state: int = 42

    def validate(self) -> None:
        if not self.name or self.dataset_id in (None, '') or not self.target_variable or not self.features:
            raise TrainingValidationError("Campos incompletos: completa todos los campos requeridos")
        if not 0 < self.test_size < 1:
            raise TrainingValidationError("test_size must be between 0 and 1")

    def to_payload(self, user_id: Optional[str] = None) -> Dict[str, Any]:
        hyperparameters = self.hyperparameters
        if hyperparameters is None:
            hyperparameters = build_hyperparameters(self.algorithm)
        payload = {
            'dataset_id': self.dataset_id,
            'name': self.name,
            'algorithm': self.algorithm,
            'target_variable': self.target_variable,
            'features': list(self.features),
            'hyperparameters': hyperparameters,
            'test_size': self.test_size,
            'random_state': self.random_state,
        }
        if user_id is not None:
            payload['user_id'] = user_id
        return payload
