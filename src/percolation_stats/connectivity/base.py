"""
Abstract base class for dynamic connectivity structures.
"""

from abc import ABC, abstractmethod


class DynamicConnectivity(ABC):
    """
    Abstract base class for incremental connectivity over elements 0..size-1.
    
    Subclasses must implement union(), find(), count() and __len__().
    Unions are never undone.
    """
    
    @abstractmethod
    def union(self, a: int, b: int) -> bool:
        """
        Merge the components containing a and b.
        
        Args:
            a: First element
            b: Second element
            
        Returns:
            True if two components were merged, False if already connected
        """
        pass
    
    @abstractmethod
    def find(self, a: int) -> int:
        """
        Return the canonical root of the component containing a.
        
        Args:
            a: Element index
            
        Returns:
            Root element index
        """
        pass
    
    @abstractmethod
    def count(self) -> int:
        """Return the number of components."""
        pass
    
    @abstractmethod
    def __len__(self) -> int:
        pass
    
    def connected(self, a: int, b: int) -> bool:
        """
        Check whether a and b belong to the same component.
        
        Args:
            a: First element
            b: Second element
            
        Returns:
            True if a and b share a root
        """
        return self.find(a) == self.find(b)
